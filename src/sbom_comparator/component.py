"""
Component module for representing the records of a software bill of materials.

This module provides the data containers shared by every stage of a
comparison:
1. Component, with its name, group, version and pass-through metadata
2. Property and ExternalReference records attached to a component
3. Tool, Metadata and Bom describing the enclosing inventory document
4. The identity contract used to match components across two documents
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

DIFF_REASON_PROPERTY = "diff reason"


@dataclass(frozen=True)
class Property:
    """A name/value annotation carried by a component."""

    name: str
    value: str = ""


@dataclass(frozen=True)
class ExternalReference:
    """A link from a component to an outside resource (VCS, website, ...)."""

    type: str
    url: str
    comment: Optional[str] = None


@dataclass(frozen=True)
class Component:
    """
    Represents a single entry of an inventory document.

    Only name, group and version take part in comparisons. Everything else
    is carried along so that the derivative document keeps what the source
    document said about the component.

    Attributes:
        name: Component name
        version: Component version, compared as trimmed text
        group: Namespace of the component (optional)
        publisher: Publisher or vendor (optional)
        type: CycloneDX component type, e.g. "library" (optional)
        purl: Package URL (optional)
        bom_ref: Document-local reference (optional)
        description: Free text description (optional)
        properties: Ordered name/value annotations
        external_references: References, or None if the document had none
        extra: Other raw members of the source record, passed through
    """

    name: str
    version: str = ""
    group: Optional[str] = None
    publisher: Optional[str] = None
    type: Optional[str] = None
    purl: Optional[str] = None
    bom_ref: Optional[str] = None
    description: Optional[str] = None
    properties: Tuple[Property, ...] = ()
    external_references: Optional[Tuple[ExternalReference, ...]] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def get_property(self, *names: str) -> Optional[str]:
        """Return the value of the first property whose name matches one of
        ``names`` case-insensitively, or None."""
        wanted = {n.lower() for n in names}
        for prop in self.properties:
            if prop.name and prop.name.lower() in wanted:
                return prop.value
        return None


@dataclass(frozen=True)
class Tool:
    """A piece of software that produced or processed an inventory document."""

    name: Optional[str] = None
    vendor: Optional[str] = None
    version: Optional[str] = None

    @property
    def key(self) -> Tuple[Optional[str], Optional[str]]:
        return (self.name, self.vendor)


@dataclass(frozen=True)
class Metadata:
    timestamp: Optional[datetime] = None
    tools: Tuple[Tool, ...] = ()
    component: Optional[Component] = None


@dataclass(frozen=True)
class Bom:
    """
    An inventory document: its header fields, metadata and component list.

    Attributes:
        serial_number: Document serial number (urn:uuid:...)
        version: Document revision
        spec_version: CycloneDX specification version
        xmlns: Namespace declaration of the document
        metadata: Document metadata, if the source declared any
        components: Component list in document order
        source: Reference of the file the document was read from
    """

    serial_number: Optional[str] = None
    version: int = 1
    spec_version: str = "1.3"
    xmlns: Optional[str] = None
    metadata: Optional[Metadata] = None
    components: Tuple[Component, ...] = ()
    source: Optional[str] = None

    @property
    def tools(self) -> Tuple[Tool, ...]:
        return self.metadata.tools if self.metadata else ()


def normalize_group(group: Optional[str]) -> Optional[str]:
    """Map absent and empty groups to the single "no group" value (None)."""
    return group if group else None


def identity(component: Component) -> Tuple[str, Optional[str]]:
    """
    Identity of a component for comparison purposes.

    Two components with equal identity but a different version are the same
    logical component at different versions.
    """
    return (component.name, normalize_group(component.group))


def same_identity(comp1: Component, comp2: Component) -> bool:
    return identity(comp1) == identity(comp2)


def same_version(comp1: Component, comp2: Component) -> bool:
    return (comp1.version or "").strip() == (comp2.version or "").strip()
