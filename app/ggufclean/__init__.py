"""ggufclean - find and remove large model-weight files by signature."""

__version__ = "0.3.0"
