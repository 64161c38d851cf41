"""
FastAPI server module for the call-sheet extraction agent.
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
