"""Configuration management for repackage."""

from __future__ import annotations

import tarfile
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

TAR_FORMATS = {
    "gnu": tarfile.GNU_FORMAT,
    "pax": tarfile.PAX_FORMAT,
    "ustar": tarfile.USTAR_FORMAT,
}


class RepackageConfig(BaseModel):
    """Repackage configuration.

    The defaults describe a cargo ``.crate`` file and should rarely need changing.
    """

    manifest_name: str = Field(default="Cargo.toml", description="File name of the package manifest")
    library_dir: str = Field(default="src", description="Top-level directory whose sources are never rewritten")
    source_suffix: str = Field(default=".rs", description="Extension of source files eligible for rewriting")
    compression_level: int = Field(default=9, ge=0, le=9, description="gzip level for the output archive")
    tar_format: Literal["gnu", "pax", "ustar"] = Field(default="gnu", description="Header format of the output archive")

    @property
    def tarfile_format(self) -> int:
        """The :mod:`tarfile` format constant for ``tar_format``."""
        return TAR_FORMATS[self.tar_format]

    @classmethod
    def load(cls, config_path: Path | None = None) -> RepackageConfig:
        """Load configuration from file or use defaults."""
        if config_path is None:
            # Look for config in .repackage/config.yaml
            config_path = Path(".repackage/config.yaml")

        if config_path.exists():
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
            return cls.model_validate(data)

        return cls()

    def save(self, config_path: Path) -> None:
        """Save configuration to file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with config_path.open("w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)
