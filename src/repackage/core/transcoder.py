"""Streaming rewrite of a gzip'd tar .crate archive.

Entries are read from the input archive one at a time, in order, and written
to the output archive under the new base directory. Cargo.toml and eligible
``.rs`` files are read into memory because their new size must be known
before the header is written; everything else is streamed through.
"""

from __future__ import annotations

import gzip
import io
import logging
import tarfile
from collections.abc import Iterator
from pathlib import PurePosixPath
from typing import BinaryIO

from repackage.config import RepackageConfig
from repackage.core.errors import MissingManifestError, archive_stage
from repackage.core.models import EntryRoute, SubstitutionPattern, TranscodeSummary
from repackage.core.references import is_eligible_source, rewrite_references
from repackage.parsers.manifest import rename_manifest
from repackage.utils.paths import rewrite_entry_path

logger = logging.getLogger(__name__)

# PAX records that would override the header fields we rewrite
_OVERRIDDEN_PAX_KEYS = frozenset({"path", "size"})


def route_entry(sub_path: PurePosixPath, is_file: bool, config: RepackageConfig) -> EntryRoute:
    """Decide how an entry is handled, from its path relative to the base directory."""
    if not is_file:
        return EntryRoute.PASSTHROUGH
    if sub_path.name == config.manifest_name:
        return EntryRoute.MANIFEST
    if is_eligible_source(sub_path, config):
        return EntryRoute.SOURCE
    return EntryRoute.PASSTHROUGH


def _retarget(member: tarfile.TarInfo, path: str, size: int | None = None) -> tarfile.TarInfo:
    """Copy a header with a new path and, optionally, a new size.

    The checksum is recomputed by tarfile when the header is written.
    """
    header = member.replace(name=path)
    header.pax_headers = {k: v for k, v in member.pax_headers.items() if k not in _OVERRIDDEN_PAX_KEYS}
    if size is not None:
        header.size = size
    return header


class CrateTranscoder:
    """Copies a .crate archive, renaming the crate it contains.

    Args:
        old_name: Current crate name, as declared in Cargo.toml.
        new_name: Name to give the crate.
        old_base_dir: Directory every input entry must live under.
        new_base_dir: Directory every output entry is written under.
        config: Routing and output format settings.
    """

    def __init__(
        self,
        old_name: str,
        new_name: str,
        old_base_dir: str,
        new_base_dir: str,
        config: RepackageConfig | None = None,
    ) -> None:
        self.old_name = old_name
        self.new_name = new_name
        self.old_base_dir = old_base_dir
        self.new_base_dir = new_base_dir
        self.config = config or RepackageConfig()
        self.pattern = SubstitutionPattern.for_names(old_name, new_name)

    def transcode(self, source: BinaryIO, sink: BinaryIO) -> TranscodeSummary:
        """Read a gzip'd tar from ``source`` and write the renamed one to ``sink``.

        Raises:
            MissingManifestError: No Cargo.toml was found. ``sink`` has
                already received a (useless) archive by then; removing it is
                up to the caller.
            RepackageError: Any other failure, see :mod:`repackage.core.errors`.
        """
        summary = TranscodeSummary()

        with (
            archive_stage("open .crate file"),
            gzip.GzipFile(fileobj=source, mode="rb") as compressed,
            tarfile.open(fileobj=compressed, mode="r|") as archive,
        ):
            with (
                archive_stage("create new .crate file"),
                gzip.GzipFile(
                    filename="",
                    fileobj=sink,
                    mode="wb",
                    compresslevel=self.config.compression_level,
                    mtime=0,
                ) as recompressed,
                tarfile.open(fileobj=recompressed, mode="w|", format=self.config.tarfile_format) as repackaged,
            ):
                for member in self._entries(archive):
                    sub_path, path = rewrite_entry_path(member.name, self.old_base_dir, self.new_base_dir)
                    route = route_entry(sub_path, member.isfile(), self.config)
                    logger.debug(f"{member.name} -> {path} ({route.value})")

                    if route == EntryRoute.MANIFEST:
                        self._append_manifest(archive, repackaged, member, path)
                    elif route == EntryRoute.SOURCE:
                        if self._append_source(archive, repackaged, member, path):
                            summary.rewritten_sources += 1
                    else:
                        self._append_unmodified(archive, repackaged, member, path)
                    summary.record(route)

                if not summary.manifests:
                    raise MissingManifestError(f".crate file did not contain a {self.config.manifest_name} file")

        logger.info(
            f"Transcoded {summary.entries} entries "
            f"({summary.rewritten_sources}/{summary.sources} sources rewritten, {summary.passthrough} unmodified)"
        )
        return summary

    def _entries(self, archive: tarfile.TarFile) -> Iterator[tarfile.TarInfo]:
        members = iter(archive)
        while True:
            with archive_stage("walk entries from .crate file"):
                member = next(members, None)
            if member is None:
                return
            yield member

    def _append_manifest(
        self,
        archive: tarfile.TarFile,
        repackaged: tarfile.TarFile,
        member: tarfile.TarInfo,
        path: str,
    ) -> None:
        with archive_stage(f"read {self.config.manifest_name} from .crate file"):
            data = self._read(archive, member)

        data = rename_manifest(data, self.old_name, self.new_name)

        with archive_stage(f"append modified {self.config.manifest_name} to new .crate file"):
            repackaged.addfile(_retarget(member, path, size=len(data)), io.BytesIO(data))

    def _append_source(
        self,
        archive: tarfile.TarFile,
        repackaged: tarfile.TarFile,
        member: tarfile.TarInfo,
        path: str,
    ) -> bool:
        """Rewrite and append a source file. Returns whether its content changed."""
        with archive_stage(f"read {self.config.source_suffix} file for in-place modification"):
            text = self._read(archive, member).decode("utf-8")

        rewritten = rewrite_references(text, self.pattern)
        data = rewritten.encode("utf-8")

        with archive_stage(f"append {self.config.source_suffix} file to new .crate file"):
            repackaged.addfile(_retarget(member, path, size=len(data)), io.BytesIO(data))
        return rewritten is not text

    def _append_unmodified(
        self,
        archive: tarfile.TarFile,
        repackaged: tarfile.TarFile,
        member: tarfile.TarInfo,
        path: str,
    ) -> None:
        with archive_stage("append unmodified file to new .crate file"):
            fileobj = archive.extractfile(member) if member.isfile() else None
            repackaged.addfile(_retarget(member, path), fileobj)

    @staticmethod
    def _read(archive: tarfile.TarFile, member: tarfile.TarInfo) -> bytes:
        fileobj = archive.extractfile(member)
        if fileobj is None:
            return b""
        return fileobj.read()
