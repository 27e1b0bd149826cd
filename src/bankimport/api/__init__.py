"""HTTP layer for bankimport."""

from bankimport.api.app import create_app

__all__ = ["create_app"]
