"""HTTP boundary for Mail Search."""

from .app import create_app

__all__ = ["create_app"]
