"""Repackage a .crate file under a different crate name."""

from __future__ import annotations

import logging
from pathlib import Path

from repackage.config import RepackageConfig
from repackage.core.errors import InvalidInputPathError, MissingManifestError, archive_stage
from repackage.core.names import base_dir, rename_file_name, resolve_old_name, validate_new_name
from repackage.core.transcoder import CrateTranscoder

logger = logging.getLogger(__name__)


def _file_name(dot_crate: Path) -> str:
    """Extract the .crate file name, rejecting paths that have none."""
    file_name = dot_crate.name
    if not file_name or file_name in (".", ".."):
        raise InvalidInputPathError(f".crate file path '{dot_crate}' is not a file")
    try:
        file_name.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidInputPathError(f".crate file path '{dot_crate}' is not valid utf-8") from e
    return file_name


def _remove_output(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove incomplete {path}: {e}")


def dot_crate(
    dot_crate: Path | str,
    old_name: str | None,
    new_name: str,
    config: RepackageConfig | None = None,
) -> Path:
    """Repackage the crate in the ``.crate`` tarball at ``dot_crate`` as ``new_name``.

    Pass the old crate name to verify that the .crate file is the one you
    think it is; otherwise it is inferred from the file name. Either way it
    is needed to rewrite references to the crate in ``.rs`` files outside
    ``src/``.

    The repackaged file is written next to the input with the crate name
    replaced: repackaging ``baz/foo-0.1.0.crate`` as ``bar`` produces
    ``baz/bar-0.1.0.crate``, whose entries live under ``bar-0.1.0/``.

    Args:
        dot_crate: Path to the .crate file.
        old_name: Expected current crate name, or None to infer it.
        new_name: Name to repackage the crate as.
        config: Optional settings, defaults describe a cargo .crate.

    Returns:
        Path of the repackaged .crate file.

    Raises:
        RepackageError: On any failure. If the archive turns out to contain
            no Cargo.toml, the output file is removed first; other failures
            may leave a partial output file behind.
    """
    dot_crate = Path(dot_crate)
    config = config or RepackageConfig()

    old_fn = _file_name(dot_crate)
    old_name = resolve_old_name(old_fn, old_name)
    validate_new_name(new_name, old_name)

    new_fn = rename_file_name(old_fn, old_name, new_name)
    repackaged_path = dot_crate.with_name(new_fn)
    logger.info(f"Repackaging {dot_crate} as '{new_name}' into {repackaged_path}")

    transcoder = CrateTranscoder(
        old_name=old_name,
        new_name=new_name,
        old_base_dir=base_dir(old_fn),
        new_base_dir=base_dir(new_fn),
        config=config,
    )

    with archive_stage(f"open .crate file {dot_crate}"):
        source = dot_crate.open("rb")
    with source:
        with archive_stage(f"create repackaged .crate file {repackaged_path}"):
            sink = repackaged_path.open("wb")
        try:
            with sink:
                transcoder.transcode(source, sink)
        except MissingManifestError as e:
            _remove_output(repackaged_path)
            raise MissingManifestError(f".crate file {dot_crate} did not contain a {config.manifest_name} file") from e

    return repackaged_path
