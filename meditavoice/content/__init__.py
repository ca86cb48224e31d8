"""Content-marketing pipeline: scheduled blog publishing."""

from .blog import BlogPostLibrary

__all__ = ["BlogPostLibrary"]
