"""Crate name inference and file-name rewriting."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath

from repackage.core.errors import InvalidNameError, NameInferenceError, NameMismatchError

logger = logging.getLogger(__name__)


def infer_crate_name(file_name: str) -> str | None:
    """Infer the crate name from a ``<name>-<version>.crate`` file name.

    Crate names never contain ``.``, so we look for the first ``.`` and walk
    backwards to the last ``-`` before it. The segment in between must be the
    major version, i.e. ASCII digits only. Anchoring on the version this way
    keeps ``netscape-0.1.0.crate`` from matching a crate called ``net``.

    Args:
        file_name: Bare file name, without any directory part.

    Returns:
        The inferred crate name, or None if the file name has no
        ``-<digits>.`` version boundary.
    """
    dot = file_name.find(".")
    if dot == -1:
        return None

    dash = file_name.rfind("-", 0, dot)
    if dash == -1:
        return None

    name = file_name[:dash]
    major = file_name[dash + 1 : dot]
    if not name or not major or not (major.isascii() and major.isdigit()):
        return None
    return name


def resolve_old_name(file_name: str, old_name: str | None = None) -> str:
    """Determine the name of the crate being repackaged.

    Args:
        file_name: Bare file name of the .crate file.
        old_name: Name the caller expects the crate to have, if known.

    Returns:
        The crate's current name.

    Raises:
        NameMismatchError: ``old_name`` was given but does not match the file name.
        NameInferenceError: ``old_name`` was not given and cannot be inferred.
    """
    inferred = infer_crate_name(file_name)

    if old_name is not None and inferred != old_name:
        raise NameMismatchError(
            f".crate file '{file_name}' does not match given old name '{old_name}'",
            expected=old_name,
            actual=inferred,
        )

    resolved = old_name if old_name is not None else inferred
    if not resolved:
        raise NameInferenceError(f"failed to infer current crate name from '{file_name}'")

    logger.debug(f"Resolved old crate name '{resolved}' from '{file_name}'")
    return resolved


def validate_new_name(new_name: str, old_name: str) -> None:
    """Reject new names that cannot produce a sensible output file."""
    if not new_name:
        raise InvalidNameError("new crate name must not be empty")
    if any(c in new_name for c in "./\\"):
        raise InvalidNameError(f"new crate name '{new_name}' must not contain '.' or path separators")
    if new_name == old_name:
        raise InvalidNameError(f"new crate name '{new_name}' is the same as the old one")


def rename_file_name(file_name: str, old_name: str, new_name: str) -> str:
    """Replace the first occurrence of ``old_name`` in ``file_name``."""
    return file_name.replace(old_name, new_name, 1)


def base_dir(file_name: str) -> str:
    """Top-level directory of a .crate file: its name without the extension."""
    return PurePosixPath(file_name).stem
