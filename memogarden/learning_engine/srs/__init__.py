"""Spaced repetition: memory model and forgetting curve."""
