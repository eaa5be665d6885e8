"""Stream providers."""
