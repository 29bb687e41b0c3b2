"""Domain models and factories."""
