"""Core repackaging logic."""

from repackage.core.errors import (
    ArchiveError,
    EntryOutsidePackageRootError,
    InvalidInputPathError,
    InvalidNameError,
    ManifestParseError,
    MissingManifestError,
    MissingPackageSectionError,
    NameInferenceError,
    NameMismatchError,
    RepackageError,
    WorkspaceNotSupportedError,
)
from repackage.core.models import EntryRoute, SubstitutionPattern, TranscodeSummary
from repackage.core.orchestrator import dot_crate
from repackage.core.transcoder import CrateTranscoder

__all__ = [
    "ArchiveError",
    "CrateTranscoder",
    "EntryOutsidePackageRootError",
    "EntryRoute",
    "InvalidInputPathError",
    "InvalidNameError",
    "ManifestParseError",
    "MissingManifestError",
    "MissingPackageSectionError",
    "NameInferenceError",
    "NameMismatchError",
    "RepackageError",
    "SubstitutionPattern",
    "TranscodeSummary",
    "WorkspaceNotSupportedError",
    "dot_crate",
]
