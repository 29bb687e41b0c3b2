"""HTTP surface for wacloud."""
