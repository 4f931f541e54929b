"""Routes package."""
from app.routes import extract

__all__ = ["extract"]
