"""Daily food logging."""
