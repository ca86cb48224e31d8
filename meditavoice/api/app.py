"""FastAPI application serving meditation, audio, payment, blog, and influencer routes.

Responsibilities:
- Map HTTP requests onto the store, generator, TTS chain, content, and influencer services.
- Render failures as JSON `{error, details?}` bodies with fitting status codes.
- Serve saved audio files under `/audio`.
"""

from __future__ import annotations

import base64
import binascii
import hmac
from typing import Any, Optional

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from ..clients.base import ProviderError
from ..config import MeditavoiceConfig
from ..errors import (
    InfluencerNotFoundError,
    InvalidBlogPostError,
    InvalidInfluencerError,
    MeditationNotFoundError,
    SpeechSynthesisUnavailableError,
)
from ..llm.script_generator import truncate_for_storage
from ..parsing import normalize_optional_string, sanitize_filename_stem
from ..payments import PaymentsUnavailableError
from ..provider_factory import ServiceBundle
from ..telemetry.logger import RunLogger
from .schemas import (
    AudioRequest,
    CheckoutRequest,
    CreateInfluencerRequest,
    CreateMeditationRequest,
    DownloadRequest,
    RateMeditationRequest,
    SaveAudioFileRequest,
    SaveAudioRequest,
    ScheduleBlogPostRequest,
    SetInfluencerPasswordRequest,
    TrackReferralRequest,
    UpdateContentRequest,
)


DEFAULT_AUDIO_DURATION_SECONDS = 5


def error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    """Build the JSON error body shared by every route."""

    body: dict[str, Any] = {"error": error}
    if details:
        body["details"] = details
    return JSONResponse(body, status_code=status_code)


def is_admin_request(request: Request, admin_password: str | None) -> bool:
    """Return whether the request carries the configured admin password.

    Accepted carriers are `Authorization: Bearer <password>` and the
    `admin_key` query parameter. Without a configured password every
    request is denied.
    """

    if not admin_password:
        return False
    candidates: list[str] = []
    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith("bearer "):
        candidates.append(authorization[7:].strip())
    query_key = request.query_params.get("admin_key")
    if query_key:
        candidates.append(query_key)
    return any(
        hmac.compare_digest(candidate.encode("utf-8"), admin_password.encode("utf-8"))
        for candidate in candidates
    )


def _decode_audio_data(audio_data: str) -> bytes:
    """Decode base64 audio, accepting an optional `data:` URL prefix."""

    payload = audio_data.split(",", 1)[1] if audio_data.startswith("data:") else audio_data
    return base64.b64decode(payload, validate=True)


def create_app(
    config: MeditavoiceConfig,
    services: ServiceBundle,
    run_logger: RunLogger | None = None,
) -> FastAPI:
    """Create the API application around already-built services."""

    logger = run_logger or RunLogger()
    app = FastAPI(title="Meditavoice", docs_url="/docs")
    app.state.services = services

    @app.exception_handler(RequestValidationError)
    async def _validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        # Only integer meditation ids can fail path validation.
        if any(tuple(error.get("loc", ()))[:1] == ("path",) for error in exc.errors()):
            return error_response(400, "Invalid ID")
        details = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}"
            for error in exc.errors()
        )
        return error_response(422, "Invalid request", details)

    @app.get("/api/test")
    def api_test() -> dict[str, str]:
        return {"status": "ok", "message": "Server is working"}

    @app.get("/api/models")
    def list_models() -> list[str]:
        return services.generator.list_models()

    @app.get("/api/voices")
    def list_voices() -> list[dict[str, str]]:
        return [voice.as_dict() for voice in services.catalog.list_voices()]

    @app.post("/api/meditations")
    def create_meditation(body: CreateMeditationRequest) -> Any:
        try:
            script = services.generator.generate(body.prompt, body.model)
        except ProviderError as exc:
            return error_response(500, "Failed to generate meditation", str(exc))
        record = services.store.create(
            prompt=body.prompt,
            content=truncate_for_storage(script.content),
            model=script.model,
        )
        logger.log_event("api", "meditation_created", id=record.id, model=script.model)
        return {**record.as_dict(), "duration": script.duration_seconds}

    @app.get("/api/meditations")
    def list_meditations() -> list[dict[str, Any]]:
        return [record.as_dict() for record in services.store.list()]

    @app.get("/api/meditations/{meditation_id}")
    def get_meditation(meditation_id: int) -> Any:
        record = services.store.get(meditation_id)
        if record is None:
            return error_response(404, "Meditation not found")
        return record.as_dict()

    @app.patch("/api/meditations/{meditation_id}/rate")
    def rate_meditation(meditation_id: int, body: RateMeditationRequest) -> Any:
        try:
            record = services.store.rate(meditation_id, body.rating)
        except MeditationNotFoundError:
            return error_response(404, "Meditation not found")
        return record.as_dict()

    @app.patch("/api/meditations/{meditation_id}/content")
    def update_meditation_content(meditation_id: int, body: UpdateContentRequest) -> Any:
        content = normalize_optional_string(body.content)
        if content is None:
            return error_response(400, "Content is required")
        try:
            record = services.store.update_content(
                meditation_id, truncate_for_storage(body.content or "")
            )
        except MeditationNotFoundError:
            return error_response(404, "Meditation not found")
        return record.as_dict()

    @app.delete("/api/meditations/{meditation_id}", status_code=204)
    def delete_meditation(meditation_id: int) -> Response:
        services.store.delete(meditation_id)
        return Response(status_code=204)

    @app.get("/api/meditations/{meditation_id}/audio")
    def stream_meditation_audio(
        meditation_id: int,
        voice_id: Optional[str] = Query(default=None),
    ) -> Response:
        voice = normalize_optional_string(voice_id)
        if voice is None:
            return error_response(400, "Voice ID is required")
        record = services.store.get(meditation_id)
        if record is None or not record.content:
            return error_response(404, "Meditation not found or has no content")
        try:
            audio = services.synthesizer.synthesize(record.content, voice)
        except SpeechSynthesisUnavailableError as exc:
            return error_response(500, "Failed to generate audio", str(exc))
        return Response(
            content=audio,
            media_type="audio/mpeg",
            headers={
                "Content-Length": str(len(audio)),
                "Cache-Control": "no-cache",
                "Content-Disposition": "inline",
            },
        )

    @app.post("/api/meditations/audio")
    def synthesize_inline_audio(body: AudioRequest) -> Any:
        text = normalize_optional_string(body.text)
        voice = normalize_optional_string(body.voiceId)
        if text is None or voice is None:
            return error_response(400, "Text and voice ID are required")
        try:
            audio = services.synthesizer.synthesize(text, voice)
        except SpeechSynthesisUnavailableError as exc:
            return error_response(500, "Failed to generate audio", str(exc))
        encoded = base64.b64encode(audio).decode("ascii")
        return {
            "success": True,
            "audioUrl": f"data:audio/mpeg;base64,{encoded}",
            "duration": body.duration or DEFAULT_AUDIO_DURATION_SECONDS,
            "format": "mp3",
        }

    @app.post("/api/meditations/save-audio")
    def save_synthesized_audio(body: SaveAudioRequest) -> Any:
        text = normalize_optional_string(body.text)
        voice = normalize_optional_string(body.voiceId)
        if text is None or voice is None:
            return error_response(400, "Text and voice ID are required")
        try:
            audio = services.synthesizer.synthesize(text, voice)
        except SpeechSynthesisUnavailableError as exc:
            return error_response(500, "Failed to generate audio", str(exc))
        path = services.audio_store.save_audio(body.filename, audio)
        logger.log_event("api", "audio_saved", filename=path.name, bytes=len(audio))
        return {"success": True, "filename": path.name, "url": f"/audio/{path.name}"}

    @app.post("/api/meditations/save-audio-file")
    def save_uploaded_audio(body: SaveAudioFileRequest) -> Any:
        audio_data = normalize_optional_string(body.audioData)
        if audio_data is None:
            return error_response(400, "Audio data is required")
        try:
            audio = _decode_audio_data(audio_data)
        except (binascii.Error, ValueError) as exc:
            return error_response(400, "Audio data must be base64 encoded", str(exc))
        path = services.audio_store.save_audio(body.filename, audio)
        logger.log_event("api", "audio_saved", filename=path.name, bytes=len(audio))
        return {"success": True, "filename": path.name, "url": f"/audio/{path.name}"}

    @app.post("/api/meditations/download")
    def download_script(body: DownloadRequest) -> Response:
        if normalize_optional_string(body.content) is None:
            return error_response(400, "Content is required")
        title = normalize_optional_string(body.title)
        stem = sanitize_filename_stem(title) if title is not None else "meditation"
        return Response(
            content=body.content,
            media_type="text/plain",
            headers={"Content-Disposition": f'attachment; filename="{stem}.txt"'},
        )

    @app.post("/api/payments/create-checkout")
    def create_checkout(body: CheckoutRequest) -> Any:
        try:
            return services.payments.create_checkout(
                amount=body.amount,
                success_url=body.successUrl or "",
                cancel_url=body.cancelUrl or "",
                metadata=body.metadata,
            )
        except ValueError as exc:
            return error_response(400, "Invalid checkout request", str(exc))
        except PaymentsUnavailableError as exc:
            return error_response(503, "Payments unavailable", str(exc))
        except ProviderError as exc:
            return error_response(500, "Failed to create checkout session", str(exc))

    @app.get("/api/payments/checkout-status/{session_id}")
    def checkout_status(session_id: str) -> Any:
        try:
            return services.payments.checkout_status(session_id)
        except PaymentsUnavailableError as exc:
            return error_response(503, "Payments unavailable", str(exc))
        except ProviderError as exc:
            return error_response(500, "Failed to retrieve checkout session", str(exc))

    @app.get("/api/blog/posts")
    def blog_posts(slug: Optional[str] = Query(default=None)) -> Any:
        requested = normalize_optional_string(slug)
        if requested is not None:
            post = services.blog.get_published(requested)
            if post is None:
                return error_response(404, "Not found")
            return {"post": post}
        return {"posts": services.blog.list_published()}

    @app.post("/api/blog/schedule")
    def schedule_blog_post(request: Request, body: ScheduleBlogPostRequest) -> Any:
        if not is_admin_request(request, config.admin_password):
            return error_response(401, "Unauthorized")
        try:
            entry = services.blog.schedule_post(body.post_body(), body.scheduledFor)
        except InvalidBlogPostError as exc:
            return error_response(400, str(exc))
        return {
            "ok": True,
            "contentId": entry.content_id,
            "slug": entry.slug,
            "scheduledFor": entry.scheduled_for.isoformat() if entry.scheduled_for else None,
        }

    @app.get("/api/admin/influencers")
    def list_influencers(request: Request) -> Any:
        if not is_admin_request(request, config.admin_password):
            return error_response(401, "Unauthorized")
        return {
            "success": True,
            "influencers": [item.as_dict() for item in services.influencers.list_influencers()],
        }

    @app.post("/api/admin/influencers")
    def create_influencer(request: Request, body: CreateInfluencerRequest) -> Any:
        if not is_admin_request(request, config.admin_password):
            return error_response(401, "Unauthorized")
        try:
            influencer = services.influencers.create_influencer(
                name=body.name,
                code=body.code,
                commission_rate=body.commissionRate,
                payout_method=body.payoutMethod,
                password=body.password,
            )
        except InvalidInfluencerError as exc:
            return error_response(400, str(exc))
        return {"success": True, "influencer": influencer.as_dict()}

    @app.patch("/api/admin/influencers")
    def set_influencer_password(request: Request, body: SetInfluencerPasswordRequest) -> Any:
        if not is_admin_request(request, config.admin_password):
            return error_response(401, "Unauthorized")
        try:
            services.influencers.set_password(body.influencerId, body.password)
        except InvalidInfluencerError as exc:
            return error_response(400, str(exc))
        except InfluencerNotFoundError:
            return error_response(404, "Influencer not found")
        return {"success": True}

    @app.get("/api/admin/influencers/{influencer_id}/stats")
    def influencer_stats(request: Request, influencer_id: str) -> Any:
        if not is_admin_request(request, config.admin_password):
            return error_response(401, "Unauthorized")
        try:
            return services.influencers.stats(influencer_id)
        except InfluencerNotFoundError:
            return error_response(404, "Influencer not found")

    @app.post("/api/referrals/track")
    def track_referral(request: Request, body: TrackReferralRequest) -> Any:
        forwarded = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
        client_ip = forwarded or (request.client.host if request.client else None)
        try:
            services.influencers.track_referral(
                body.referral_code,
                referral_url=body.referral_url,
                user_agent=body.user_agent or request.headers.get("user-agent"),
                ip_address=client_ip,
            )
        except InvalidInfluencerError as exc:
            return error_response(400, str(exc))
        except InfluencerNotFoundError as exc:
            return error_response(404, "Unknown referral code", str(exc))
        return {"success": True, "message": "Referral tracked successfully"}

    app.mount(
        "/audio",
        StaticFiles(directory=services.audio_store.ensure_root(), check_dir=False),
        name="audio",
    )
    return app
