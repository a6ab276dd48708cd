import json
from datetime import datetime, timezone
from xml.etree import ElementTree as ET

import pytest

from sbom_comparator.bom_loader import bom_from_dict, bom_from_xml
from sbom_comparator.bom_writer import (
    bom_to_dict,
    bom_to_json,
    bom_to_xml,
    format_timestamp,
    serialize_bom,
)
from sbom_comparator.component import Bom, Component
from sbom_comparator.derivative import build_derivative
from sbom_comparator.differ import classify_boms
from sbom_comparator.exceptions import RenderError

NOW = datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)
NS = "{http://cyclonedx.org/schema/bom/1.3}"


def derivative_of(original_bom, updated_bom):
    return build_derivative(original_bom, updated_bom, classify_boms(original_bom, updated_bom), timestamp=NOW)


def test_json_document_shape(original_bom, updated_bom):
    data = json.loads(bom_to_json(derivative_of(original_bom, updated_bom)))

    assert data["bomFormat"] == "CycloneDX"
    assert data["serialNumber"] == "urn:uuid:new"
    assert data["version"] == 3
    assert data["metadata"]["timestamp"] == "2024-05-01T08:30:00Z"
    assert data["metadata"]["component"]["name"] == "demo-app"
    assert [t["name"] for t in data["metadata"]["tools"]][1:] == ["cyclonedx-maven-plugin", "license-scanner"]
    reasons = [(c["name"], c["properties"][-1]) for c in data["components"]]
    assert reasons == [
        ("slf4j", {"name": "diff reason", "value": "added"}),
        ("log4j", {"name": "diff reason", "value": "modified"}),
    ]
    assert all(c["externalReferences"] == [] for c in data["components"])


def test_xml_document_shape(original_bom, updated_bom):
    text = bom_to_xml(derivative_of(original_bom, updated_bom))
    root = ET.fromstring(text.encode("utf-8"))

    assert root.tag == NS + "bom"
    assert root.get("serialNumber") == "urn:uuid:new"
    assert root.get("version") == "3"
    assert root.find(f"{NS}metadata/{NS}timestamp").text == "2024-05-01T08:30:00Z"
    names = [c.find(NS + "name").text for c in root.find(NS + "components")]
    assert names == ["slf4j", "log4j"]
    props = root.findall(f"{NS}components/{NS}component/{NS}properties/{NS}property")
    assert [(p.get("name"), p.text) for p in props] == [("diff reason", "added"), ("diff reason", "modified")]


def test_written_documents_load_back(original_bom, updated_bom):
    bom = derivative_of(original_bom, updated_bom)

    from_json = bom_from_dict(json.loads(bom_to_json(bom, pretty=False)))
    from_xml = bom_from_xml(ET.fromstring(bom_to_xml(bom, pretty=False).encode("utf-8")))

    for loaded in (from_json, from_xml):
        assert loaded.components == bom.components
        assert loaded.tools == bom.tools
        assert loaded.metadata.timestamp == NOW


def test_extra_members_are_passed_through():
    bom = bom_from_dict({"components": [{"name": "a", "version": "1", "licenses": [{"license": {"id": "MIT"}}]}]})
    assert bom_to_dict(bom)["components"][0]["licenses"] == [{"license": {"id": "MIT"}}]


def test_serialize_bom_dispatches_on_format(updated_bom):
    assert serialize_bom(updated_bom, "JSON").lstrip().startswith("{")
    assert serialize_bom(updated_bom, "xml").startswith("<?xml")


def test_xml_document_omits_absent_identity_fields(updated_bom):
    root = ET.fromstring(bom_to_xml(updated_bom).encode("utf-8"))
    slf4j = root.findall(f"{NS}components/{NS}component")[1]
    assert [e.tag.replace(NS, "") for e in slf4j] == ["group", "name", "version"]


def test_illegal_xml_character_raises_render_error():
    bom = Bom(components=(Component(name="bad\x01name", version="1"),))
    with pytest.raises(RenderError, match="failed to render XML SBom"):
        bom_to_xml(bom)
    assert "bad\\u0001name" in bom_to_json(bom)


def test_naive_timestamps_are_treated_as_utc():
    assert format_timestamp(datetime(2024, 1, 1, 0, 0)) == "2024-01-01T00:00:00Z"
    assert format_timestamp(None) is None
