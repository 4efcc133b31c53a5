"""
vectorpackager - Debian package builder for the timescaledb-vector extension
"""

__version__ = "0.1.0"

from .core import DebPackager, PackagerError

__all__ = ["DebPackager", "PackagerError"]
