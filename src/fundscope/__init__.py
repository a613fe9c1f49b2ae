"""fundscope: similarity search and ranking over fund records."""

__version__ = "0.3.0"
