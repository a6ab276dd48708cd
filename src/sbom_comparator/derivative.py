"""
Builder for the derivative inventory document.

The derivative document holds only what has to be reviewed again going
forward: every added component and the new side of every modified one, each
tagged with a "diff reason" property. Its header comes from the new
document and its tool list merges the tools of both documents with an entry
for this comparator.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from importlib import metadata as importlib_metadata
from typing import Iterable, List, Optional

from sbom_comparator.component import (
    DIFF_REASON_PROPERTY,
    Bom,
    Component,
    Metadata,
    Property,
    Tool,
)
from sbom_comparator.differ import ClassificationResult

logger = logging.getLogger(__name__)

TOOL_NAME = "SBomComparator"
TOOL_VENDOR = "Lockheed Martin"
DISTRIBUTION_NAME = "sbom-comparator"
UNKNOWN_VERSION = "unknown"

REASON_ADDED = "added"
REASON_MODIFIED = "modified"


def resolve_tool_version(distribution: str = DISTRIBUTION_NAME) -> str:
    """Version of the installed comparator, or "unknown" if it cannot be found."""
    try:
        version = importlib_metadata.version(distribution)
    except importlib_metadata.PackageNotFoundError:
        logger.warning("Unable to determine version of %s! Setting to %s.",
                       distribution, UNKNOWN_VERSION)
        return UNKNOWN_VERSION
    logger.debug("Version: %s", version)
    return version or UNKNOWN_VERSION


def comparator_tool() -> Tool:
    return Tool(name=TOOL_NAME, vendor=TOOL_VENDOR, version=resolve_tool_version())


def merge_tools(*tool_lists: Iterable[Tool]) -> List[Tool]:
    """Concatenate tool lists, keeping the first tool seen per (name, vendor)."""
    merged: List[Tool] = []
    seen = set()
    for tools in tool_lists:
        for tool in tools or ():
            if tool.key in seen:
                continue
            seen.add(tool.key)
            merged.append(tool)
    return merged


def tag_component(component: Component, reason: str) -> Component:
    """Copy of ``component`` with the diff reason appended to its properties.

    Components without external references get an empty tuple so that the
    serialized document never carries a null reference list.
    """
    return replace(
        component,
        properties=component.properties + (Property(DIFF_REASON_PROPERTY, reason),),
        external_references=component.external_references or (),
    )


def build_metadata(original: Bom, updated: Bom, timestamp: Optional[datetime] = None) -> Metadata:
    subject = updated.metadata.component if updated.metadata else None
    tools = merge_tools([comparator_tool()], updated.tools, original.tools)
    return Metadata(
        timestamp=timestamp or datetime.now(timezone.utc),
        tools=tuple(tools),
        component=subject,
    )


def build_derivative(original: Bom, updated: Bom, result: ClassificationResult,
                     timestamp: Optional[datetime] = None) -> Bom:
    """
    Build the derivative document for a comparison.

    Args:
        original: The original inventory document
        updated: The new inventory document
        result: Classification of original against updated
        timestamp: Creation time to record, defaults to now (UTC)

    Returns:
        A new Bom; the inputs are left untouched
    """
    components = [tag_component(c, REASON_ADDED) for c in result.added]
    components.extend(tag_component(pair.current, REASON_MODIFIED) for pair in result.modified)

    derivative = Bom(
        serial_number=updated.serial_number,
        version=updated.version,
        spec_version=updated.spec_version,
        xmlns=updated.xmlns,
        metadata=build_metadata(original, updated, timestamp),
        components=tuple(components),
    )
    logger.debug("Derivative document holds %d components", len(components))
    return derivative
