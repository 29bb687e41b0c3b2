"""Core configuration and logging for wacloud."""
