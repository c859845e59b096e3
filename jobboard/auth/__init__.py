"""Authentication boundary: bearer tokens and the authenticated Actor."""

from .tokens import Actor, AuthenticationError, TokenService

__all__ = ["Actor", "AuthenticationError", "TokenService"]
