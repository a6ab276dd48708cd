"""
Structured renderings of a classification result.

One renderer per output format, each able to produce a compact (single line)
or a pretty (indented) document and to parse such a document back into a
ClassificationResult. Both formats use the same three members:
componentsAdded, componentsRemoved and modifiedComponents.
"""

import json
import logging
from typing import Any, Dict, List
from xml.etree import ElementTree as ET

from sbom_comparator.bom_loader import component_from_dict, component_from_element
from sbom_comparator.bom_writer import component_to_dict, component_to_element, element_to_string
from sbom_comparator.config import FORMAT_JSON, FORMAT_XML, parse_output_format
from sbom_comparator.differ import ClassificationResult, ModifiedComponent
from sbom_comparator.exceptions import RenderError

logger = logging.getLogger(__name__)

ADDED_KEY = "componentsAdded"
REMOVED_KEY = "componentsRemoved"
MODIFIED_KEY = "modifiedComponents"
PREVIOUS_KEY = "previousComponent"
NEW_KEY = "newComponent"
XML_ROOT = "sbomDiff"


def result_to_dict(result: ClassificationResult) -> Dict[str, List[Any]]:
    return {
        ADDED_KEY: [component_to_dict(c, keep_identity=True) for c in result.added],
        REMOVED_KEY: [component_to_dict(c, keep_identity=True) for c in result.removed],
        MODIFIED_KEY: [
            {
                PREVIOUS_KEY: component_to_dict(pair.previous, keep_identity=True),
                NEW_KEY: component_to_dict(pair.current, keep_identity=True),
            }
            for pair in result.modified
        ],
    }


def result_from_dict(data: Dict[str, Any]) -> ClassificationResult:
    return ClassificationResult(
        added=tuple(component_from_dict(c) for c in data.get(ADDED_KEY) or []),
        removed=tuple(component_from_dict(c) for c in data.get(REMOVED_KEY) or []),
        modified=tuple(
            ModifiedComponent(previous=component_from_dict(m[PREVIOUS_KEY]),
                              current=component_from_dict(m[NEW_KEY]))
            for m in data.get(MODIFIED_KEY) or []
        ),
    )


class JsonDiffRenderer:
    """Renders a classification result as JSON."""

    name = FORMAT_JSON

    def _dump(self, result: ClassificationResult, **kwargs: Any) -> str:
        try:
            return json.dumps(result_to_dict(result), ensure_ascii=False, **kwargs)
        except (TypeError, ValueError) as e:
            logger.error("Unable to produce the JSON String for the SBom Diff!")
            raise RenderError(f"failed to render JSON diff: {e}") from e

    def render_compact(self, result: ClassificationResult) -> str:
        return self._dump(result, separators=(",", ":"))

    def render_pretty(self, result: ClassificationResult) -> str:
        return self._dump(result, indent=2)

    def parse_back(self, text: str) -> ClassificationResult:
        try:
            data = json.loads(text)
            if not isinstance(data, dict):
                raise ValueError("top level is not an object")
            return result_from_dict(data)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise RenderError(f"failed to parse JSON diff: {e}") from e


class XmlDiffRenderer:
    """Renders a classification result as XML rooted at <sbomDiff>."""

    name = FORMAT_XML

    def to_element(self, result: ClassificationResult) -> ET.Element:
        root = ET.Element(XML_ROOT)
        added = ET.SubElement(root, ADDED_KEY)
        for comp in result.added:
            added.append(component_to_element(comp, keep_identity=True))
        removed = ET.SubElement(root, REMOVED_KEY)
        for comp in result.removed:
            removed.append(component_to_element(comp, keep_identity=True))
        modified = ET.SubElement(root, MODIFIED_KEY)
        for pair in result.modified:
            pair_elem = ET.SubElement(modified, "modifiedComponent")
            pair_elem.append(component_to_element(pair.previous, tag=PREVIOUS_KEY, keep_identity=True))
            pair_elem.append(component_to_element(pair.current, tag=NEW_KEY, keep_identity=True))
        return root

    def _dump(self, result: ClassificationResult, pretty: bool) -> str:
        try:
            return element_to_string(self.to_element(result), pretty)
        except (TypeError, ValueError) as e:
            logger.error("Unable to create XML from SBom Diff!")
            raise RenderError(f"failed to render XML diff: {e}") from e

    def render_compact(self, result: ClassificationResult) -> str:
        return self._dump(result, pretty=False)

    def render_pretty(self, result: ClassificationResult) -> str:
        return self._dump(result, pretty=True)

    def parse_back(self, text: str) -> ClassificationResult:
        try:
            root = ET.fromstring(text.encode("utf-8"))
        except ET.ParseError as e:
            raise RenderError(f"failed to parse XML diff: {e}") from e
        if root.tag != XML_ROOT:
            raise RenderError(f"failed to parse XML diff: unexpected root <{root.tag}>")

        def section(name: str) -> List[ET.Element]:
            elem = root.find(name)
            return list(elem) if elem is not None else []

        modified = []
        for pair in section(MODIFIED_KEY):
            previous, current = pair.find(PREVIOUS_KEY), pair.find(NEW_KEY)
            if previous is None or current is None:
                raise RenderError("failed to parse XML diff: incomplete modifiedComponent")
            modified.append(ModifiedComponent(previous=component_from_element(previous),
                                              current=component_from_element(current)))
        return ClassificationResult(
            added=tuple(component_from_element(c) for c in section(ADDED_KEY)),
            removed=tuple(component_from_element(c) for c in section(REMOVED_KEY)),
            modified=tuple(modified),
        )


RENDERERS = {
    FORMAT_JSON: JsonDiffRenderer(),
    FORMAT_XML: XmlDiffRenderer(),
}


def get_renderer(output_format: str):
    """Renderer for ``output_format``; raises ConfigurationError when unknown."""
    return RENDERERS[parse_output_format(output_format)]


def render_diff(result: ClassificationResult, output_format: str, pretty: bool = True) -> str:
    renderer = get_renderer(output_format)
    return renderer.render_pretty(result) if pretty else renderer.render_compact(result)
