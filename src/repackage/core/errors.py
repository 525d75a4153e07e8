"""Exceptions raised while repackaging a .crate file.

Every failure is fatal to a single repackaging run. Domain failures get their
own exception type; I/O, codec and decoding failures are wrapped in
:class:`ArchiveError` together with the stage that was running.
"""

from __future__ import annotations

import tarfile
import zlib
from collections.abc import Iterator
from contextlib import contextmanager

# Low-level failures that archive_stage() wraps with stage context
ARCHIVE_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    EOFError,
    UnicodeError,
    tarfile.TarError,
    zlib.error,
)


class RepackageError(Exception):
    """Base exception for all repackaging failures."""


class InvalidInputPathError(RepackageError):
    """The .crate path has no file name, or the file name is not valid text."""


class InvalidNameError(RepackageError):
    """The requested new crate name cannot be used."""


class NameInferenceError(RepackageError):
    """The crate name could not be inferred from the .crate file name."""


class NameMismatchError(RepackageError):
    """A crate name disagrees with the name we expected to find."""

    def __init__(self, message: str, expected: str, actual: str | None) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class ManifestParseError(RepackageError):
    """Cargo.toml could not be parsed or serialized."""


class WorkspaceNotSupportedError(RepackageError):
    """Cargo.toml declares a workspace, which is never packaged."""


class MissingPackageSectionError(RepackageError):
    """Cargo.toml has no [package] table."""


class EntryOutsidePackageRootError(RepackageError):
    """An archive entry does not live under the crate's base directory."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class MissingManifestError(RepackageError):
    """The archive did not contain a Cargo.toml."""


class ArchiveError(RepackageError):
    """An I/O or codec failure while reading or writing the archive."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"{stage}: {cause}")
        self.stage = stage
        self.cause = cause


@contextmanager
def archive_stage(stage: str) -> Iterator[None]:
    """Wrap low-level failures raised inside the block as :class:`ArchiveError`.

    Args:
        stage: Short description of the work being done, e.g.
            ``"walk entries from .crate file"``.
    """
    try:
        yield
    except RepackageError:
        raise
    except ARCHIVE_ERRORS as e:
        raise ArchiveError(stage, e) from e
