"""Manifest parsers."""

from repackage.parsers.manifest import CargoManifest, rename_manifest

__all__ = ["CargoManifest", "rename_manifest"]
