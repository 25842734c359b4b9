"""Source extractors."""
