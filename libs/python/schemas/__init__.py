"""Shared schema exports."""

from .account import Account
from .notification import WelcomeEmail

__all__ = [
    "Account",
    "WelcomeEmail",
]
