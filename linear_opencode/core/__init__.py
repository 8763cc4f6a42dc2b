"""Core runtime pieces: event bus and stream manager."""
