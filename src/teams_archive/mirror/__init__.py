"""Flat-listing to local-tree mirroring engine."""
