"""Utility modules for repackage."""

from repackage.utils.paths import rewrite_entry_path, strip_base_dir

__all__ = ["rewrite_entry_path", "strip_base_dir"]
