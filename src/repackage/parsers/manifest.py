"""Cargo.toml parsing and renaming."""

from __future__ import annotations

import logging
from typing import Any

import toml

from repackage.core.errors import (
    ManifestParseError,
    MissingPackageSectionError,
    NameMismatchError,
    WorkspaceNotSupportedError,
)

logger = logging.getLogger(__name__)


class CargoManifest:
    """A parsed Cargo.toml document.

    Only the handful of operations needed for renaming are exposed; the
    document itself is owned by the ``toml`` library and re-serialized as a
    whole.
    """

    def __init__(self, document: dict[str, Any]) -> None:
        self.document = document

    @classmethod
    def from_bytes(cls, data: bytes) -> CargoManifest:
        """Parse raw Cargo.toml bytes."""
        try:
            document = toml.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, toml.TomlDecodeError) as e:
            raise ManifestParseError(f"parse Cargo.toml from .crate file: {e}") from e
        return cls(document)

    @property
    def is_workspace(self) -> bool:
        """Whether the manifest has a [workspace] table."""
        return "workspace" in self.document

    @property
    def package(self) -> dict[str, Any]:
        """The [package] table."""
        package = self.document.get("package")
        if not isinstance(package, dict):
            raise MissingPackageSectionError("Cargo.toml in .crate file does not contain a package")
        return package

    @property
    def package_name(self) -> Any:
        return self.package.get("name")

    @package_name.setter
    def package_name(self, name: str) -> None:
        self.package["name"] = name

    def to_bytes(self) -> bytes:
        """Serialize the document back to UTF-8 TOML."""
        try:
            return toml.dumps(self.document).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise ManifestParseError(f"serialize modified Cargo.toml: {e}") from e


def rename_manifest(data: bytes, old_name: str, new_name: str) -> bytes:
    """Rename the package declared by a Cargo.toml.

    Args:
        data: Raw Cargo.toml bytes as found in the archive.
        old_name: Name the manifest must currently declare.
        new_name: Name to declare instead.

    Returns:
        The re-serialized manifest. Its length generally differs from
        ``data``, so the archive header must be resized to match.

    Raises:
        ManifestParseError: The manifest is not valid TOML.
        WorkspaceNotSupportedError: The manifest declares a workspace.
        MissingPackageSectionError: There is no [package] table.
        NameMismatchError: The declared name is not ``old_name``.
    """
    manifest = CargoManifest.from_bytes(data)
    if manifest.is_workspace:
        raise WorkspaceNotSupportedError(".crate file is a workspace, so is not packaged")

    declared = manifest.package_name
    if declared != old_name:
        raise NameMismatchError(
            f"crate name in .crate file ('{declared}') did not match given name ('{old_name}')",
            expected=old_name,
            actual=declared if isinstance(declared, str) else None,
        )

    manifest.package_name = new_name
    logger.debug(f"Renamed package in Cargo.toml: {old_name} -> {new_name}")
    return manifest.to_bytes()
