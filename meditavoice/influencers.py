"""Influencer referral partners: admin management, click tracking, and stats.

Responsibilities:
- Create influencers with unique uppercase referral codes and bcrypt-hashed
  dashboard passwords.
- Record referral events (clicks, unlocks, payments) against an influencer.
- Aggregate events into the per-influencer earnings summary.
"""

from __future__ import annotations

from datetime import datetime
import math
import re
from typing import Any, Callable

import bcrypt
from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .errors import InfluencerNotFoundError, InvalidInfluencerError
from .io.database import (
    InfluencerEventRow,
    InfluencerPasswordRow,
    InfluencerRow,
    as_utc,
    utc_now,
)
from .models.datatypes import Influencer
from .parsing import normalize_optional_string
from .telemetry.logger import RunLogger


PASSWORD_HASH_ROUNDS = 10
CLICK_EVENT = "click"
UNLOCK_EVENT = "unlock"
PAYMENT_EVENTS = frozenset({"payment", "purchase"})


class InfluencerRegistry:
    """Influencer records and referral events stored in the relational database."""

    def __init__(
        self,
        engine: Engine,
        clock: Callable[[], datetime] = utc_now,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize the registry with an engine whose schema already exists."""

        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)
        self._clock = clock
        self.run_logger = run_logger or RunLogger()

    def list_influencers(self) -> list[Influencer]:
        """Return every influencer, oldest first, flagging who has a dashboard password."""

        with self._sessions() as session:
            rows = session.scalars(
                select(InfluencerRow).order_by(InfluencerRow.created_at, InfluencerRow.id)
            ).all()
            with_password = set(session.scalars(select(InfluencerPasswordRow.influencer_id)).all())
            return [_to_influencer(row, row.id in with_password) for row in rows]

    def create_influencer(
        self,
        *,
        name: object,
        code: object,
        commission_rate: object,
        payout_method: object,
        password: object,
    ) -> Influencer:
        """Validate and insert an influencer plus its hashed dashboard password.

        Raises:
            InvalidInfluencerError: On missing fields, an out-of-range rate, or a taken code.
        """

        normalized_name = normalize_optional_string(name)
        normalized_code = normalize_optional_string(code)
        normalized_password = normalize_optional_string(password)
        if normalized_name is None or normalized_code is None or normalized_password is None:
            raise InvalidInfluencerError("name, code, and password required")
        rate = parse_commission_rate(commission_rate)
        method = "paypal" if payout_method == "paypal" else "stripe"
        referral_code = normalized_code.upper()

        with self._sessions.begin() as session:
            taken = session.scalars(
                select(InfluencerRow.id).where(InfluencerRow.code == referral_code)
            ).first()
            if taken is not None:
                raise InvalidInfluencerError("Code already in use")
            row = InfluencerRow(
                id=_next_influencer_id(session),
                name=normalized_name,
                code=referral_code,
                commission_rate=rate,
                payout_method=method,
                created_at=self._clock(),
            )
            session.add(row)
            session.add(
                InfluencerPasswordRow(
                    influencer_id=row.id,
                    password_hash=hash_password(normalized_password),
                    updated_at=self._clock(),
                )
            )
            session.flush()
            influencer = _to_influencer(row, True)

        self.run_logger.log_event("influencers", "created", id=influencer.id, code=referral_code)
        return influencer

    def set_password(self, influencer_id: object, password: object) -> None:
        """Create or replace an influencer's dashboard password hash."""

        normalized_id = normalize_optional_string(influencer_id)
        normalized_password = normalize_optional_string(password)
        if normalized_id is None or normalized_password is None:
            raise InvalidInfluencerError("influencerId and password required")

        with self._sessions.begin() as session:
            _require_influencer(session, normalized_id)
            row = session.get(InfluencerPasswordRow, normalized_id)
            password_hash = hash_password(normalized_password)
            if row is None:
                session.add(
                    InfluencerPasswordRow(
                        influencer_id=normalized_id,
                        password_hash=password_hash,
                        updated_at=self._clock(),
                    )
                )
            else:
                row.password_hash = password_hash
                row.updated_at = self._clock()

        self.run_logger.log_event("influencers", "password_set", id=normalized_id)

    def check_password(self, influencer_id: str, password: str) -> bool:
        """Return whether `password` matches the stored dashboard password."""

        with self._sessions() as session:
            row = session.get(InfluencerPasswordRow, influencer_id)
            if row is None:
                return False
            return bcrypt.checkpw(password.encode("utf-8"), row.password_hash.encode("utf-8"))

    def track_referral(
        self,
        referral_code: object,
        *,
        referral_url: str | None = None,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> str:
        """Record a click for the influencer owning `referral_code` and return its id."""

        normalized_code = normalize_optional_string(referral_code)
        if normalized_code is None:
            raise InvalidInfluencerError("referral_code is required")

        with self._sessions.begin() as session:
            influencer_id = session.scalars(
                select(InfluencerRow.id).where(InfluencerRow.code == normalized_code.upper())
            ).first()
            if influencer_id is None:
                raise InfluencerNotFoundError(f"Unknown referral code `{normalized_code}`.")
            session.add(
                InfluencerEventRow(
                    influencer_id=influencer_id,
                    event_type=CLICK_EVENT,
                    amount=0,
                    referral_url=referral_url,
                    user_agent=user_agent,
                    ip_address=ip_address,
                    timestamp=self._clock(),
                )
            )

        self.run_logger.log_event("referrals", "click", influencer=influencer_id)
        return influencer_id

    def record_event(self, influencer_id: str, event_type: str, amount_cents: int = 0) -> None:
        """Record an unlock, payment, or other referral event for an influencer."""

        normalized_type = normalize_optional_string(event_type)
        if normalized_type is None:
            raise InvalidInfluencerError("event_type is required")
        with self._sessions.begin() as session:
            _require_influencer(session, influencer_id)
            session.add(
                InfluencerEventRow(
                    influencer_id=influencer_id,
                    event_type=normalized_type.lower(),
                    amount=int(amount_cents),
                    timestamp=self._clock(),
                )
            )

    def stats(self, influencer_id: str) -> dict[str, Any]:
        """Return click, unlock, payment, revenue, and commission totals for one influencer.

        Revenue and commission are in whole currency units rounded to cents.
        """

        with self._sessions() as session:
            influencer = _require_influencer(session, influencer_id)
            events = session.scalars(
                select(InfluencerEventRow).where(InfluencerEventRow.influencer_id == influencer_id)
            ).all()
            commission_rate = influencer.commission_rate

        clicks = unlocks = payments = revenue_cents = 0
        for event in events:
            kind = (event.event_type or "").lower()
            if kind == CLICK_EVENT:
                clicks += 1
            elif kind == UNLOCK_EVENT:
                unlocks += 1
            elif kind in PAYMENT_EVENTS:
                payments += 1
                revenue_cents += event.amount or 0

        revenue = revenue_cents / 100
        return {
            "unlocks": unlocks,
            "payments": payments,
            "revenue": _round_cents(revenue),
            "commission": _round_cents(revenue * commission_rate),
            "clicks": clicks,
            "commissionRate": commission_rate,
        }


def parse_commission_rate(value: object) -> float:
    """Parse a commission share between 0 and 1 inclusive."""

    message = "commissionRate must be between 0 and 1 (e.g. 0.25 for 25%)"
    if isinstance(value, bool) or value is None:
        raise InvalidInfluencerError(message)
    try:
        rate = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidInfluencerError(message) from exc
    if math.isnan(rate) or not 0 <= rate <= 1:
        raise InvalidInfluencerError(message)
    return rate


def hash_password(password: str) -> str:
    """Hash a dashboard password with bcrypt."""

    salt = bcrypt.gensalt(rounds=PASSWORD_HASH_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def _next_influencer_id(session: Session) -> str:
    """Return `inf-<n>` one past the highest numeric suffix in use."""

    suffixes = (re.sub(r"\D", "", existing) for existing in session.scalars(select(InfluencerRow.id)))
    numbers = [int(digits) for digits in suffixes if digits]
    return f"inf-{max(numbers, default=0) + 1}"


def _require_influencer(session: Session, influencer_id: str) -> InfluencerRow:
    row = session.get(InfluencerRow, influencer_id)
    if row is None:
        raise InfluencerNotFoundError(f"Influencer `{influencer_id}` not found.")
    return row


def _round_cents(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def _to_influencer(row: InfluencerRow, has_password: bool) -> Influencer:
    return Influencer(
        id=row.id,
        name=row.name,
        code=row.code,
        commission_rate=row.commission_rate,
        payout_method=row.payout_method,
        created_at=as_utc(row.created_at),
        has_password=has_password,
    )
