"""
Authentication Module

Student sign-in by registration email or account identifier.
"""

from .router import router

__all__ = ["router"]
