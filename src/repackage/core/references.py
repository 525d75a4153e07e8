"""Best-effort rewriting of crate references in source files.

Library code under ``src/`` refers to itself through ``crate::`` and never
names the crate, so only tests, examples, benches and build scripts can
mention the old name. Those are rewritten with plain string replacement of
`` old_name::`` by `` new_name::``.

Requiring the leading space and the trailing ``::`` keeps a crate called
``toml`` from touching ``use foo_toml::bar;``, ``use foo::toml::bar;`` or a
field named ``toml``. The price is that references after a tab, at the start
of a line, or right after ``(`` are left alone, as are ``use toml;`` and
``extern crate toml;``.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from repackage.config import RepackageConfig
from repackage.core.models import SubstitutionPattern


def is_eligible_source(sub_path: PurePosixPath, config: RepackageConfig) -> bool:
    """Whether a file may have its crate references rewritten.

    Args:
        sub_path: Entry path relative to the crate's base directory.
        config: Supplies the library directory and source suffix.
    """
    if sub_path.parts and sub_path.parts[0] == config.library_dir:
        return False
    return sub_path.suffix == config.source_suffix


def rewrite_references(text: str, pattern: SubstitutionPattern) -> str:
    """Replace every occurrence of the old crate path root in ``text``.

    A single left-to-right pass; replaced text is never re-scanned. Returns
    ``text`` itself when there is nothing to replace.
    """
    if pattern.old not in text:
        return text
    return text.replace(pattern.old, pattern.new)
