"""Repackage .crate files under a different crate name."""

from repackage.core import RepackageError, dot_crate

__version__ = "0.1.0"

__all__ = ["RepackageError", "__version__", "dot_crate"]
