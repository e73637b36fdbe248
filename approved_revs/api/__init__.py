"""HTTP surface for approval actions."""

from .main import create_app

__all__ = ["create_app"]
