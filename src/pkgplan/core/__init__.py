"""Core planning engine: repository model and the resolution pipeline."""
