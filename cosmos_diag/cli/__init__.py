"""
Command line interface for COSMOS_DIAG.
"""

from .main import cli

__all__ = ["cli"]
