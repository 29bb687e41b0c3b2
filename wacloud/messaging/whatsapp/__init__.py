"""WhatsApp Cloud API messaging."""
