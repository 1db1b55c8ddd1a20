"""Notification event contracts published to the email channel."""

from __future__ import annotations

from pydantic import BaseModel


class WelcomeEmail(BaseModel):
    to: str
    subject: str = "Welcome to my microservice application"
    body: str = "It's glad to have you onboard, thanks for checking it out"
    version: str = "v1"
