"""Pytest configuration shared across the suite."""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for path in (str(ROOT), str(SRC)):
    if path not in sys.path:
        sys.path.insert(0, path)

from sbom_comparator.component import Bom, Component, Metadata, Property, Tool  # noqa: E402

DATA_DIR = Path(__file__).resolve().parent / "data"


def make_component(name, version, group=None, **kwargs):
    return Component(name=name, version=version, group=group, **kwargs)


@pytest.fixture
def data_dir():
    return DATA_DIR


@pytest.fixture
def log4j_old():
    return make_component("log4j", "1.2.12", "log4j",
                          properties=(Property("efossStatus", "APPROVED"),))


@pytest.fixture
def log4j_new():
    return make_component("log4j", "1.2.17", "log4j")


@pytest.fixture
def slf4j():
    return make_component("slf4j", "1.7.0", "slf4j")


@pytest.fixture
def original_bom(log4j_old):
    return Bom(
        serial_number="urn:uuid:org",
        version=1,
        metadata=Metadata(tools=(Tool(name="cyclonedx-maven-plugin", vendor="CycloneDX", version="2.5.3"),)),
        components=(log4j_old,),
    )


@pytest.fixture
def updated_bom(log4j_new, slf4j):
    return Bom(
        serial_number="urn:uuid:new",
        version=3,
        xmlns="http://cyclonedx.org/schema/bom/1.3",
        metadata=Metadata(
            tools=(
                Tool(name="cyclonedx-maven-plugin", vendor="CycloneDX", version="2.5.3"),
                Tool(name="license-scanner", vendor="Acme", version="1.4"),
            ),
            component=make_component("demo-app", "2.0", "com.example", type="application"),
        ),
        components=(log4j_new, slf4j),
    )
