"""Per-team archiving and the top-level archive run."""
