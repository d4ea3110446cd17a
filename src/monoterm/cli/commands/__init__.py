"""monoterm CLI commands."""
