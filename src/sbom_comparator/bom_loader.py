"""
Loading of inventory documents into Bom objects.

Supported inputs:
1. CycloneDX JSON (.json) and the same structure written as YAML (.yaml, .yml)
2. CycloneDX XML (.xml), any schema namespace
3. Component spreadsheets (.xlsx, .xls, .csv) with one component per row

Empty strings are read as missing values, so a blank group and an absent
group load the same way.
"""

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple
from xml.etree import ElementTree as ET

import pandas as pd
import yaml

from sbom_comparator.component import Bom, Component, ExternalReference, Metadata, Property, Tool
from sbom_comparator.exceptions import BomLoadError
from sbom_comparator.status import EFOSS_PROPERTY_NAMES

logger = logging.getLogger(__name__)

CYCLONEDX_NS_PREFIX = "http://cyclonedx.org/schema/bom/"
DEFAULT_SPEC_VERSION = "1.3"

_KNOWN_COMPONENT_KEYS = {
    "name", "version", "group", "publisher", "type", "purl", "bom-ref",
    "description", "properties", "externalReferences",
}

# Spreadsheet header aliases, lower-cased
_COLUMN_ALIASES = {
    "name": "name",
    "component": "name",
    "group": "group",
    "namespace": "group",
    "version": "version",
    "publisher": "publisher",
    "vendor": "publisher",
    "supplier": "publisher",
    "type": "type",
    "purl": "purl",
    "package url": "purl",
    "description": "description",
}


def display_name(reference: Optional[str]) -> str:
    """Final path segment of a file reference, for either separator style."""
    if not reference:
        return ""
    return re.split(r"[\\/]", str(reference))[-1]


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).replace('_x000d_', '').replace('_x000D_', '').strip()
    return text or None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    text = _clean(value)
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Ignoring unparseable timestamp %r", value)
        return None


def spec_version_from_namespace(xmlns: Optional[str]) -> str:
    if xmlns and xmlns.startswith(CYCLONEDX_NS_PREFIX):
        return xmlns[len(CYCLONEDX_NS_PREFIX):] or DEFAULT_SPEC_VERSION
    return DEFAULT_SPEC_VERSION


def namespace_for(spec_version: Optional[str]) -> str:
    return CYCLONEDX_NS_PREFIX + (spec_version or DEFAULT_SPEC_VERSION)


def _to_int(value: Any, default: int = 1) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# ---------------------------------------------------------------- JSON / YAML

def component_from_dict(data: Dict[str, Any]) -> Component:
    """Build a Component from a CycloneDX JSON component object."""
    properties = tuple(
        Property(name=_clean(p.get("name")) or "", value=str(p.get("value") or ""))
        for p in (data.get("properties") or []) if isinstance(p, dict)
    )
    refs = data.get("externalReferences")
    external_references = None
    if isinstance(refs, list):
        external_references = tuple(
            ExternalReference(type=str(r.get("type", "")), url=str(r.get("url", "")),
                              comment=_clean(r.get("comment")))
            for r in refs if isinstance(r, dict)
        )
    return Component(
        name=_clean(data.get("name")) or "",
        version=_clean(data.get("version")) or "",
        group=_clean(data.get("group")),
        publisher=_clean(data.get("publisher")),
        type=_clean(data.get("type")),
        purl=_clean(data.get("purl")),
        bom_ref=_clean(data.get("bom-ref")),
        description=_clean(data.get("description")),
        properties=properties,
        external_references=external_references,
        extra={k: v for k, v in data.items() if k not in _KNOWN_COMPONENT_KEYS},
    )


def _tools_from_json(tools: Any) -> Tuple[Tool, ...]:
    # CycloneDX 1.5 moved tools under {"components": [...], "services": [...]}
    if isinstance(tools, dict):
        entries = list(tools.get("components") or []) + list(tools.get("services") or [])
        return tuple(
            Tool(name=_clean(t.get("name")),
                 vendor=_clean(t.get("publisher") or t.get("group")),
                 version=_clean(t.get("version")))
            for t in entries if isinstance(t, dict)
        )
    return tuple(
        Tool(name=_clean(t.get("name")), vendor=_clean(t.get("vendor")),
             version=_clean(t.get("version")))
        for t in (tools or []) if isinstance(t, dict)
    )


def bom_from_dict(data: Dict[str, Any], source: Optional[str] = None) -> Bom:
    """Build a Bom from a parsed CycloneDX JSON document."""
    if not isinstance(data, dict):
        raise BomLoadError(f"Invalid document in {source}: expected an object at top level.")
    metadata = None
    raw_meta = data.get("metadata")
    if isinstance(raw_meta, dict):
        subject = raw_meta.get("component")
        metadata = Metadata(
            timestamp=_parse_timestamp(raw_meta.get("timestamp")),
            tools=_tools_from_json(raw_meta.get("tools")),
            component=component_from_dict(subject) if isinstance(subject, dict) else None,
        )
    spec_version = _clean(data.get("specVersion")) or DEFAULT_SPEC_VERSION
    components = []
    for item in data.get("components") or []:
        if not isinstance(item, dict):
            logger.warning("Skipping non-object component in %s: %r", source, item)
            continue
        components.append(component_from_dict(item))
    return Bom(
        serial_number=_clean(data.get("serialNumber")),
        version=_to_int(data.get("version")),
        spec_version=spec_version,
        xmlns=namespace_for(spec_version),
        metadata=metadata,
        components=tuple(components),
        source=source,
    )


# ------------------------------------------------------------------------ XML

def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(elem: ET.Element, name: str) -> Optional[ET.Element]:
    for child in elem:
        if _local(child.tag) == name:
            return child
    return None


def _children(elem: Optional[ET.Element], name: str) -> List[ET.Element]:
    if elem is None:
        return []
    return [child for child in elem if _local(child.tag) == name]


def _text(elem: ET.Element, name: str) -> Optional[str]:
    child = _child(elem, name)
    return _clean(child.text) if child is not None else None


def component_from_element(elem: ET.Element) -> Component:
    """Build a Component from a <component> element, namespaced or not."""
    properties = tuple(
        Property(name=p.get("name", ""), value=(p.text or "").strip())
        for p in _children(_child(elem, "properties"), "property")
    )
    refs_elem = _child(elem, "externalReferences")
    external_references = None
    if refs_elem is not None:
        external_references = tuple(
            ExternalReference(type=r.get("type", ""), url=_text(r, "url") or "",
                              comment=_text(r, "comment"))
            for r in _children(refs_elem, "reference")
        )
    return Component(
        name=_text(elem, "name") or "",
        version=_text(elem, "version") or "",
        group=_text(elem, "group"),
        publisher=_text(elem, "publisher"),
        type=_clean(elem.get("type")),
        purl=_text(elem, "purl"),
        bom_ref=_clean(elem.get("bom-ref")),
        description=_text(elem, "description"),
        properties=properties,
        external_references=external_references,
    )


def _tools_from_element(tools_elem: Optional[ET.Element]) -> Tuple[Tool, ...]:
    if tools_elem is None:
        return ()
    tools = [
        Tool(name=_text(t, "name"), vendor=_text(t, "vendor"), version=_text(t, "version"))
        for t in _children(tools_elem, "tool")
    ]
    for comp in _children(_child(tools_elem, "components"), "component"):
        tools.append(Tool(name=_text(comp, "name"),
                          vendor=_text(comp, "publisher") or _text(comp, "group"),
                          version=_text(comp, "version")))
    return tuple(tools)


def bom_from_xml(root: ET.Element, source: Optional[str] = None) -> Bom:
    """Build a Bom from the root <bom> element of a CycloneDX XML document."""
    if _local(root.tag) != "bom":
        raise BomLoadError(f"Invalid document in {source}: root element is <{_local(root.tag)}>, expected <bom>.")
    xmlns = root.tag[1:].split("}", 1)[0] if root.tag.startswith("{") else None
    metadata = None
    meta_elem = _child(root, "metadata")
    if meta_elem is not None:
        subject = _child(meta_elem, "component")
        metadata = Metadata(
            timestamp=_parse_timestamp(_text(meta_elem, "timestamp")),
            tools=_tools_from_element(_child(meta_elem, "tools")),
            component=component_from_element(subject) if subject is not None else None,
        )
    spec_version = spec_version_from_namespace(xmlns)
    return Bom(
        serial_number=_clean(root.get("serialNumber")),
        version=_to_int(root.get("version")),
        spec_version=spec_version,
        xmlns=xmlns or namespace_for(spec_version),
        metadata=metadata,
        components=tuple(component_from_element(c)
                         for c in _children(_child(root, "components"), "component")),
        source=source,
    )


# ---------------------------------------------------------------- Spreadsheet

def _build_column_mapping(columns: Iterable[Any]) -> Dict[str, str]:
    """Map Component field names (plus "efoss") to spreadsheet headers."""
    mapping = {}
    efoss_names = {n.lower() for n in EFOSS_PROPERTY_NAMES}
    for col in columns:
        col_str = str(col)
        col_lower = col_str.lower().strip()
        if col_lower in _COLUMN_ALIASES and _COLUMN_ALIASES[col_lower] not in mapping:
            mapping[_COLUMN_ALIASES[col_lower]] = col_str
        elif col_lower in efoss_names:
            mapping["efoss"] = col_str
    return mapping


def components_from_frame(df: pd.DataFrame, source: Optional[str] = None) -> List[Component]:
    mapping = _build_column_mapping(df.columns)
    if "name" not in mapping:
        raise BomLoadError(f"Missing required column 'name' in {source}. Available: {list(df.columns)}")
    components = []
    for _, row in df.iterrows():
        values = {field: _clean(row.get(col, "")) for field, col in mapping.items()}
        efoss = values.pop("efoss", None)
        values["name"] = values.get("name") or ""
        values["version"] = values.get("version") or ""
        properties = (Property(EFOSS_PROPERTY_NAMES[0], efoss),) if efoss else ()
        components.append(Component(properties=properties, **values))
    return components


# ------------------------------------------------------------------- Dispatch

def load_bom(input_file: str) -> Bom:
    """
    Load an inventory document from a file.

    Args:
        input_file: Path to the document

    Returns:
        Bom read from the file, with ``source`` set to ``input_file``

    Raises:
        FileNotFoundError: If the file does not exist
        BomLoadError: If the format is unsupported or the content is invalid
    """
    input_path = Path(input_file)
    if not input_path.exists():
        raise FileNotFoundError(f"Input file {input_file} not found.")
    suffix = input_path.suffix.lower()
    source = str(input_file)
    logger.debug("Attempting to load SBom (%s)", source)

    try:
        if suffix in ('.json', '.yaml', '.yml'):
            with open(input_path, 'r', encoding='utf-8') as f:
                data = json.load(f) if suffix == '.json' else yaml.safe_load(f)
            bom = bom_from_dict(data, source)
        elif suffix == '.xml':
            bom = bom_from_xml(ET.parse(input_path).getroot(), source)
        elif suffix in ('.xlsx', '.xls', '.csv'):
            if suffix == '.csv':
                df = pd.read_csv(input_path, dtype=str)
            else:
                df = pd.read_excel(input_path, dtype=str)
            df.fillna('', inplace=True)
            bom = Bom(components=tuple(components_from_frame(df, source)),
                      xmlns=namespace_for(DEFAULT_SPEC_VERSION), source=source)
        else:
            raise BomLoadError(f"Unsupported input file: {input_path.suffix}.")
    except BomLoadError:
        raise
    except Exception as e:
        logger.error("Unable to read SBom from file (%s)", source)
        raise BomLoadError(f"Error reading {input_path.name}: {e}") from e

    logger.debug("Loaded %d components from %s", len(bom.components), source)
    return bom
