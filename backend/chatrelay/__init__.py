"""ChatRelay backend."""
