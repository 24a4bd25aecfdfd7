"""Core module - session lifecycle, message relay, errors and logging setup."""
