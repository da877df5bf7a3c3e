"""Teams archive — mirrors Microsoft Teams channel metadata and document libraries to disk."""

__version__ = "0.1.0"
