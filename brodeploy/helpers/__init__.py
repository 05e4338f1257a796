"""Chain client and artifact persistence."""
