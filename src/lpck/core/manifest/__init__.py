"""Package manifest model and storage.

This subpackage separates manifest I/O (ManifestStore) from the pipeline that
decides when manifests are mutated, so tests can substitute in-memory stores.
"""

from lpck.core.manifest.abc import (
    DEPENDENCY_FIELDS,
    MANIFEST_FILENAME,
    DependencyField,
    Manifest,
    ManifestStore,
    validate_manifest_content,
)
from lpck.core.manifest.models import PackageManifest
from lpck.core.manifest.real import RealManifestStore

__all__ = [
    "DEPENDENCY_FIELDS",
    "MANIFEST_FILENAME",
    "DependencyField",
    "Manifest",
    "ManifestStore",
    "PackageManifest",
    "RealManifestStore",
    "validate_manifest_content",
]
