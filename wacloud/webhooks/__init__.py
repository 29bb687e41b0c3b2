"""Inbound webhook handling."""

from .verifier import SUBSCRIBE_MODE, WebhookVerificationResult, WebhookVerifier

__all__ = ["SUBSCRIBE_MODE", "WebhookVerificationResult", "WebhookVerifier"]
