"""Inventory rendering — the ``product.inf`` file read by the installer.

One header line, then one line per artifact with 13 comma-separated fields.
The format has no escaping: values must already be free of commas and line
breaks (see ``taktool.core.extractor.sanitize_value``).
"""

from __future__ import annotations

from taktool.models.artifacts import ArtifactRecord

INVENTORY_HEADER = (
    "#platform (Android Windows or iOS), type (app or plugin), full package name, "
    "display/label, version, revision code (integer), relative path to APK file, "
    "relative path to icon file, description, apk hash, os requirement, "
    "tak prereq (e.g. plugin-api), apk size"
)

FIELD_COUNT = 13


def sort_key(record: ArtifactRecord) -> tuple[str, str, str, str, str]:
    return (
        record.platform,
        record.kind.value,
        record.identity_name,
        record.display_name,
        record.version_string,
    )


def sort_records(records: list[ArtifactRecord]) -> list[ArtifactRecord]:
    """Order records by platform, kind, identity, display name and version."""
    return sorted(records, key=sort_key)


def render_line(record: ArtifactRecord) -> str:
    fields = (
        record.platform,
        record.kind.value,
        record.identity_name,
        record.display_name,
        record.version_string,
        record.revision,
        record.artifact_path,
        record.icon_ref,
        record.description,
        record.content_digest,
        str(record.min_platform_version),
        record.min_host_version,
        str(record.size_bytes),
    )
    return ",".join(fields)


def render_inventory(records: list[ArtifactRecord]) -> str:
    """Render the full inventory text, without a trailing newline."""
    lines = [INVENTORY_HEADER]
    lines.extend(render_line(record) for record in sort_records(records))
    return "\n".join(lines)
