"""Archive entry path helpers."""

from __future__ import annotations

from pathlib import PurePosixPath

from repackage.core.errors import EntryOutsidePackageRootError


def strip_base_dir(path: str, base_dir: str) -> PurePosixPath:
    """Return ``path`` relative to ``base_dir``.

    Raises:
        EntryOutsidePackageRootError: ``path`` is not under ``base_dir`` or
            climbs back out of it with ``..``.
    """
    try:
        sub_path = PurePosixPath(path).relative_to(base_dir)
    except ValueError:
        raise EntryOutsidePackageRootError(
            f".crate contained entry not under old crate subdir: {path}",
            path=path,
        ) from None

    if ".." in sub_path.parts:
        raise EntryOutsidePackageRootError(f".crate contained entry escaping crate subdir: {path}", path=path)
    return sub_path


def rewrite_entry_path(path: str, old_base_dir: str, new_base_dir: str) -> tuple[PurePosixPath, str]:
    """Move an entry from ``old_base_dir`` to ``new_base_dir``.

    Returns:
        Tuple of:
        - sub_path: the entry path relative to the base directory
        - new_path: the full path to write into the new archive
    """
    sub_path = strip_base_dir(path, old_base_dir)
    return sub_path, str(PurePosixPath(new_base_dir) / sub_path)
