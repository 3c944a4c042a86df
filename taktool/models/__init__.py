"""taktool data models — all Pydantic v2, all frozen (immutable)."""

from taktool.models.artifacts import ArtifactKind, ArtifactRecord
from taktool.models.data_package import MANIFEST_ENTRY, DataPackageManifest
from taktool.models.manifest import ManifestDocument, ManifestElement

__all__ = [
    # artifacts
    "ArtifactKind",
    "ArtifactRecord",
    # manifest
    "ManifestDocument",
    "ManifestElement",
    # data packages
    "DataPackageManifest",
    "MANIFEST_ENTRY",
]
