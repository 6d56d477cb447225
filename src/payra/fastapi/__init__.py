"""
FastAPI integration for Payra
"""

from payra.fastapi.app import create_app

__all__ = ["create_app"]
