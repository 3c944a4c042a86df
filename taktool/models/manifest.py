"""Manifest document models — the parsed form of AndroidManifest.xml."""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field


class ManifestElement(BaseModel):
    """One manifest element with its attributes keyed by local name."""

    model_config = ConfigDict(frozen=True)

    tag: str
    attributes: dict[str, str] = Field(default_factory=dict)


class ManifestDocument(BaseModel):
    """Elements of a manifest in document order."""

    model_config = ConfigDict(frozen=True)

    elements: tuple[ManifestElement, ...] = ()

    def iter_elements(self, tag: str) -> Iterator[ManifestElement]:
        """Yield elements with the given tag, in document order."""
        return (el for el in self.elements if el.tag == tag)
