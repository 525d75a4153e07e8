"""Core data models for repackage."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EntryRoute(str, Enum):
    """How an archive entry is handled on its way to the new archive."""

    MANIFEST = "manifest"  # Cargo.toml, renamed and re-serialized
    SOURCE = "source"  # .rs outside src/, references rewritten
    PASSTHROUGH = "passthrough"  # copied byte for byte


@dataclass(frozen=True)
class SubstitutionPattern:
    """Text replacement applied to eligible source files.

    Crate names appear in source with ``-`` spelled as ``_``, and only count as
    a reference when used as a path root preceded by a space, e.g.
    `` foo_bar::run()``.
    """

    old: str
    new: str

    @classmethod
    def for_names(cls, old_name: str, new_name: str) -> SubstitutionPattern:
        return cls(
            old=f" {old_name.replace('-', '_')}::",
            new=f" {new_name.replace('-', '_')}::",
        )


@dataclass
class TranscodeSummary:
    """Counts collected while transcoding one archive.

    Attributes:
        entries: Total entries written to the new archive
        manifests: Entries routed through the manifest editor
        sources: Source files eligible for rewriting
        rewritten_sources: Eligible source files whose content actually changed
        passthrough: Entries copied unmodified
    """

    entries: int = 0
    manifests: int = 0
    sources: int = 0
    rewritten_sources: int = 0
    passthrough: int = 0

    def record(self, route: EntryRoute) -> None:
        self.entries += 1
        if route == EntryRoute.MANIFEST:
            self.manifests += 1
        elif route == EntryRoute.SOURCE:
            self.sources += 1
        else:
            self.passthrough += 1
