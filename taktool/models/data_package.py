"""Data package manifest model (MissionPackageManifest v2)."""

from __future__ import annotations

from xml.sax.saxutils import quoteattr

from pydantic import BaseModel, ConfigDict, Field

MANIFEST_ENTRY = "MANIFEST/manifest.xml"


def _flag(value: bool) -> str:
    return "true" if value else "false"


class DataPackageManifest(BaseModel):
    """Describes the contents of a data package.

    Examples
    --------
    >>> manifest = DataPackageManifest(
    ...     uid="8b0e4d2c-6c1b-4d8e-9a3f-2f1e5d7c9b10",
    ...     name="survey",
    ...     contents=["maps/area.kml"],
    ... )
    >>> 'zipEntry="maps/area.kml"' in manifest.to_xml()
    True
    """

    model_config = ConfigDict(frozen=True)

    uid: str
    name: str
    contents: list[str] = Field(default_factory=list)
    on_receive_delete: bool = False
    on_receive_import: bool = False

    def to_xml(self) -> str:
        """Render the manifest as the XML document stored in the package."""
        lines = [
            '<MissionPackageManifest version="2">',
            "  <Configuration>",
            f'    <Parameter name="uid" value={quoteattr(self.uid)}/>',
            f'    <Parameter name="name" value={quoteattr(self.name)}/>',
            f'    <Parameter name="onReceiveImport" value="{_flag(self.on_receive_import)}"/>',
            f'    <Parameter name="onReceiveDelete" value="{_flag(self.on_receive_delete)}"/>',
            "  </Configuration>",
            "  <Contents>",
        ]
        for entry in self.contents:
            lines.append(f'    <Content ignore="false" zipEntry={quoteattr(entry)}/>')
        lines.append("  </Contents>")
        lines.append("</MissionPackageManifest>")
        return "\n".join(lines)
