"""Tests for the streaming archive transcoder."""

from __future__ import annotations

import io
import tarfile
from pathlib import PurePosixPath

import pytest
import toml
from crate_helpers import IT_RS, LIB_RS, Entry, crate_bytes, foo_entries, read_entries

from repackage.config import RepackageConfig
from repackage.core.errors import (
    ArchiveError,
    EntryOutsidePackageRootError,
    MissingManifestError,
    NameMismatchError,
    WorkspaceNotSupportedError,
)
from repackage.core.models import EntryRoute, TranscodeSummary
from repackage.core.transcoder import CrateTranscoder, route_entry


def transcode(
    entries: list[Entry], config: RepackageConfig | None = None, **kwargs: str
) -> tuple[bytes, TranscodeSummary]:
    """Transcode an in-memory foo-0.1.0 crate to bar-0.1.0."""
    names = {
        "old_name": "foo",
        "new_name": "bar",
        "old_base_dir": "foo-0.1.0",
        "new_base_dir": "bar-0.1.0",
    }
    names.update(kwargs)
    transcoder = CrateTranscoder(**names, config=config)
    sink = io.BytesIO()
    summary = transcoder.transcode(io.BytesIO(crate_bytes(entries)), sink)
    return sink.getvalue(), summary


class TestRouteEntry:
    """Tests for route_entry."""

    @pytest.mark.parametrize(
        ("sub_path", "is_file", "route"),
        [
            ("Cargo.toml", True, EntryRoute.MANIFEST),
            ("tests/it.rs", True, EntryRoute.SOURCE),
            ("build.rs", True, EntryRoute.SOURCE),
            ("src/lib.rs", True, EntryRoute.PASSTHROUGH),
            ("Cargo.toml.orig", True, EntryRoute.PASSTHROUGH),
            ("README.md", True, EntryRoute.PASSTHROUGH),
            ("tests", False, EntryRoute.PASSTHROUGH),
            ("Cargo.toml", False, EntryRoute.PASSTHROUGH),
        ],
    )
    def test_routes(self, sub_path: str, is_file: bool, route: EntryRoute) -> None:
        """Entries are routed by file name, location and type."""
        assert route_entry(PurePosixPath(sub_path), is_file, RepackageConfig()) == route


class TestCrateTranscoder:
    """Tests for CrateTranscoder.transcode."""

    def test_renames_crate(self) -> None:
        """Manifest, paths and test sources are renamed."""
        data, _ = transcode(foo_entries())
        entries = dict(read_entries(data))

        assert toml.loads(entries["bar-0.1.0/Cargo.toml"].decode())["package"]["name"] == "bar"
        assert entries["bar-0.1.0/tests/it.rs"] == IT_RS.replace(b" foo::", b" bar::")
        assert entries["bar-0.1.0/src/lib.rs"] == LIB_RS

    def test_passthrough_is_byte_identical(self) -> None:
        """Entries that are neither manifest nor eligible source are untouched."""
        original = dict(foo_entries())
        data, _ = transcode(foo_entries())
        entries = dict(read_entries(data))

        for name in ("Cargo.toml.orig", "README.md", "src/lib.rs", "assets/logo.bin"):
            assert entries[f"bar-0.1.0/{name}"] == original[f"foo-0.1.0/{name}"]

    def test_preserves_entry_order(self) -> None:
        """Entries come out in the order they went in."""
        data, _ = transcode(foo_entries())

        names = [name for name, _ in read_entries(data)]
        assert names == [name.replace("foo-0.1.0", "bar-0.1.0", 1) for name, _ in foo_entries()]

    def test_headers_match_rewritten_content(self) -> None:
        """Header sizes follow the rewritten bytes, other metadata is kept."""
        data, _ = transcode(foo_entries())

        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
            for member in archive.getmembers():
                content = archive.extractfile(member).read()
                assert member.size == len(content)
                assert member.mode == 0o644
                assert member.mtime == 1_600_000_000

    def test_summary(self) -> None:
        """The summary counts each route."""
        _, summary = transcode(foo_entries())

        assert summary.entries == 6
        assert summary.manifests == 1
        assert summary.sources == 1
        assert summary.rewritten_sources == 1
        assert summary.passthrough == 4

    def test_unchanged_source_not_counted_as_rewritten(self) -> None:
        """A test file without references is eligible but not rewritten."""
        entries = [*foo_entries()[:2], ("foo-0.1.0/build.rs", b"fn main() {}\n")]

        data, summary = transcode(entries)

        assert summary.sources == 1
        assert summary.rewritten_sources == 0
        assert dict(read_entries(data))["bar-0.1.0/build.rs"] == b"fn main() {}\n"

    def test_directory_entries(self) -> None:
        """Directory entries are renamed and passed through."""
        entries = [("foo-0.1.0", None), ("foo-0.1.0/tests", None), *foo_entries()]

        data, summary = transcode(entries)
        out = dict(read_entries(data))

        assert "bar-0.1.0" in out
        assert out["bar-0.1.0/tests"] is None
        assert summary.passthrough == 6

    def test_hyphenated_names(self) -> None:
        """Hyphens in crate names become underscores in source references."""
        entries = [
            ("my-crate-1.0.0/Cargo.toml", b'[package]\nname = "my-crate"\nversion = "1.0.0"\n'),
            ("my-crate-1.0.0/examples/demo.rs", b"fn main() { my_crate::run(); }\n"),
        ]

        data, _ = transcode(
            entries,
            old_name="my-crate",
            new_name="your-crate",
            old_base_dir="my-crate-1.0.0",
            new_base_dir="your-crate-1.0.0",
        )
        out = dict(read_entries(data))

        assert out["your-crate-1.0.0/examples/demo.rs"] == b"fn main() { your_crate::run(); }\n"
        assert b'name = "your-crate"' in out["your-crate-1.0.0/Cargo.toml"]

    def test_long_pax_paths_are_rewritten(self) -> None:
        """PAX path records are replaced by the rewritten path."""
        long_name = "foo-0.1.0/tests/" + "nested/" * 20 + "it.rs"
        entries = [*foo_entries()[:2], (long_name, IT_RS)]
        source = io.BytesIO(crate_bytes(entries, tar_format=tarfile.PAX_FORMAT))
        sink = io.BytesIO()

        CrateTranscoder("foo", "bar", "foo-0.1.0", "bar-0.1.0", RepackageConfig(tar_format="pax")).transcode(
            source, sink
        )
        out = dict(read_entries(sink.getvalue()))

        assert out[long_name.replace("foo-0.1.0", "bar-0.1.0")] == IT_RS.replace(b" foo::", b" bar::")

    def test_output_gzip_header(self) -> None:
        """The output is gzip'd at maximum compression with no file name or mtime."""
        data, _ = transcode(foo_entries())

        assert data[:3] == b"\x1f\x8b\x08"
        assert data[3] == 0  # no FNAME flag
        assert data[4:8] == b"\x00\x00\x00\x00"  # mtime
        assert data[8] == 2  # best compression

    def test_missing_manifest(self) -> None:
        """An archive without Cargo.toml is rejected after the walk."""
        entries = [name_data for name_data in foo_entries() if not name_data[0].endswith("/Cargo.toml")]

        with pytest.raises(MissingManifestError):
            transcode(entries)

    def test_workspace(self) -> None:
        """A workspace manifest aborts the transcode."""
        entries = [("foo-0.1.0/Cargo.toml", b'[package]\nname = "foo"\n\n[workspace]\n')]

        with pytest.raises(WorkspaceNotSupportedError):
            transcode(entries)

    def test_manifest_name_mismatch(self) -> None:
        """A manifest declaring another crate aborts the transcode."""
        entries = [("foo-0.1.0/Cargo.toml", b'[package]\nname = "baz"\n')]

        with pytest.raises(NameMismatchError):
            transcode(entries)

    def test_entry_outside_root(self) -> None:
        """An entry outside the base directory aborts the transcode."""
        entries = [*foo_entries(), ("elsewhere/evil.rs", b"")]

        with pytest.raises(EntryOutsidePackageRootError):
            transcode(entries)

    def test_non_utf8_source(self) -> None:
        """Eligible sources must be UTF-8."""
        entries = [*foo_entries()[:2], ("foo-0.1.0/tests/bad.rs", b"\xff\xfe")]

        with pytest.raises(ArchiveError) as exc_info:
            transcode(entries)

        assert "read .rs file" in exc_info.value.stage
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)

    def test_not_gzip(self) -> None:
        """Garbage input is reported with the failing stage."""
        transcoder = CrateTranscoder("foo", "bar", "foo-0.1.0", "bar-0.1.0")

        with pytest.raises(ArchiveError) as exc_info:
            transcoder.transcode(io.BytesIO(b"this is not a crate"), io.BytesIO())

        assert exc_info.value.stage == "open .crate file"
