"""Utility modules for popia."""

from popia.utils.logging import setup_logging

__all__ = ["setup_logging"]
