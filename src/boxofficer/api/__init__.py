"""HTTP surface for the aggregation layer."""

from .app import create_app

__all__ = ["create_app"]
