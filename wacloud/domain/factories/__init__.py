"""Factories for wiring messengers."""

from .messenger_factory import MessengerFactory

__all__ = ["MessengerFactory"]
