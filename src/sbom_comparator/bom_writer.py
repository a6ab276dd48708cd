"""
Serialization of inventory documents to CycloneDX JSON and XML.

The component converters in this module are shared with the structured diff
renderers so that a component looks the same in the diff report and in the
derivative document.
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from xml.etree import ElementTree as ET

from sbom_comparator.bom_loader import namespace_for
from sbom_comparator.component import Bom, Component, Metadata, Tool
from sbom_comparator.config import FORMAT_JSON, parse_output_format
from sbom_comparator.exceptions import RenderError

logger = logging.getLogger(__name__)

XML_PROLOG = '<?xml version="1.0" encoding="UTF-8"?>'

_IDENTITY_KEYS = ("publisher", "group", "name", "version")

# Complement of the XML 1.0 Char production
_INVALID_XML_CHARS = re.compile(r"[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# ----------------------------------------------------------------------- JSON

def component_to_dict(component: Component, keep_identity: bool = False) -> Dict[str, Any]:
    """
    CycloneDX JSON object for a component.

    Args:
        component: Component to convert
        keep_identity: Always emit name, group, version and publisher, as null
            when absent
    """
    data: Dict[str, Any] = {}
    if component.type:
        data["type"] = component.type
    if component.bom_ref:
        data["bom-ref"] = component.bom_ref
    for key in _IDENTITY_KEYS:
        value = getattr(component, key)
        if value or keep_identity:
            data[key] = value
    if component.description:
        data["description"] = component.description
    if component.purl:
        data["purl"] = component.purl
    for key, value in component.extra.items():
        data.setdefault(key, value)
    if component.external_references is not None:
        data["externalReferences"] = [
            {k: v for k, v in (("type", r.type), ("url", r.url), ("comment", r.comment)) if v is not None}
            for r in component.external_references
        ]
    if component.properties:
        data["properties"] = [{"name": p.name, "value": p.value} for p in component.properties]
    return data


def _tool_to_dict(tool: Tool) -> Dict[str, str]:
    return {k: v for k, v in (("vendor", tool.vendor), ("name", tool.name), ("version", tool.version)) if v}


def _metadata_to_dict(metadata: Metadata) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if metadata.timestamp:
        data["timestamp"] = format_timestamp(metadata.timestamp)
    data["tools"] = [_tool_to_dict(t) for t in metadata.tools]
    if metadata.component is not None:
        data["component"] = component_to_dict(metadata.component)
    return data


def bom_to_dict(bom: Bom) -> Dict[str, Any]:
    data: Dict[str, Any] = {"bomFormat": "CycloneDX", "specVersion": bom.spec_version}
    if bom.serial_number:
        data["serialNumber"] = bom.serial_number
    data["version"] = bom.version
    if bom.metadata is not None:
        data["metadata"] = _metadata_to_dict(bom.metadata)
    data["components"] = [component_to_dict(c) for c in bom.components]
    return data


def bom_to_json(bom: Bom, pretty: bool = True) -> str:
    if pretty:
        return json.dumps(bom_to_dict(bom), indent=2, ensure_ascii=False)
    return json.dumps(bom_to_dict(bom), separators=(",", ":"), ensure_ascii=False)


# ------------------------------------------------------------------------ XML

def _sub(parent: ET.Element, tag: str, text: Optional[str]) -> None:
    if text is not None:
        ET.SubElement(parent, tag).text = text


def component_to_element(component: Component, tag: str = "component",
                         keep_identity: bool = False) -> ET.Element:
    """
    <component> element in CycloneDX schema order.

    Args:
        component: Component to convert
        tag: Element name
        keep_identity: Always emit publisher, group, name and version, as
            empty elements when absent
    """
    attrs = {}
    if component.type:
        attrs["type"] = component.type
    if component.bom_ref:
        attrs["bom-ref"] = component.bom_ref
    elem = ET.Element(tag, attrs)
    for key in _IDENTITY_KEYS:
        value = getattr(component, key)
        if value:
            _sub(elem, key, value)
        elif keep_identity:
            ET.SubElement(elem, key)
    _sub(elem, "description", component.description)
    _sub(elem, "purl", component.purl)
    if component.external_references is not None:
        refs = ET.SubElement(elem, "externalReferences")
        for ref in component.external_references:
            ref_elem = ET.SubElement(refs, "reference", {"type": ref.type})
            _sub(ref_elem, "url", ref.url)
            _sub(ref_elem, "comment", ref.comment)
    if component.properties:
        props = ET.SubElement(elem, "properties")
        for prop in component.properties:
            ET.SubElement(props, "property", {"name": prop.name}).text = prop.value
    return elem


def bom_to_element(bom: Bom) -> ET.Element:
    attrs = {"xmlns": bom.xmlns or namespace_for(bom.spec_version)}
    if bom.serial_number:
        attrs["serialNumber"] = bom.serial_number
    attrs["version"] = str(bom.version)
    root = ET.Element("bom", attrs)
    if bom.metadata is not None:
        meta = ET.SubElement(root, "metadata")
        _sub(meta, "timestamp", format_timestamp(bom.metadata.timestamp))
        tools = ET.SubElement(meta, "tools")
        for tool in bom.metadata.tools:
            tool_elem = ET.SubElement(tools, "tool")
            _sub(tool_elem, "vendor", tool.vendor)
            _sub(tool_elem, "name", tool.name)
            _sub(tool_elem, "version", tool.version)
        if bom.metadata.component is not None:
            meta.append(component_to_element(bom.metadata.component))
    components = ET.SubElement(root, "components")
    for component in bom.components:
        components.append(component_to_element(component))
    return root


def check_xml_chars(root: ET.Element) -> None:
    """Raise ValueError if any text or attribute value is not legal XML 1.0."""
    for elem in root.iter():
        values = [elem.text, elem.tail]
        values.extend(elem.attrib.values())
        for value in values:
            match = _INVALID_XML_CHARS.search(value) if value else None
            if match:
                raise ValueError(f"character {match.group()!r} not allowed in XML (element <{elem.tag}>)")


def element_to_string(root: ET.Element, pretty: bool = True) -> str:
    check_xml_chars(root)
    if pretty:
        ET.indent(root)
        return XML_PROLOG + "\n" + ET.tostring(root, encoding="unicode")
    return XML_PROLOG + ET.tostring(root, encoding="unicode")


def bom_to_xml(bom: Bom, pretty: bool = True) -> str:
    try:
        return element_to_string(bom_to_element(bom), pretty)
    except (TypeError, ValueError) as e:
        logger.error("Unable to create XML from derivative SBom!")
        raise RenderError(f"failed to render XML SBom: {e}") from e


def serialize_bom(bom: Bom, output_format: str, pretty: bool = True) -> str:
    """Serialize ``bom`` in the selected output format ("xml" or "json")."""
    if parse_output_format(output_format) == FORMAT_JSON:
        return bom_to_json(bom, pretty)
    return bom_to_xml(bom, pretty)
