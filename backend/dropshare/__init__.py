"""Dropshare: share a file through a short download link."""
__version__ = "1.0.0"
