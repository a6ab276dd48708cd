from sbom_comparator.component import (
    Component,
    Property,
    Tool,
    identity,
    normalize_group,
    same_identity,
    same_version,
)


def test_identity_ignores_version():
    assert identity(Component("a", "1", "g")) == identity(Component("a", "2", "g"))


def test_identity_is_case_sensitive():
    assert not same_identity(Component("Log4j", "1", "log4j"), Component("log4j", "1", "log4j"))


def test_absent_and_empty_group_are_the_same_identity():
    assert normalize_group("") is None
    assert same_identity(Component("a", "1", None), Component("a", "1", ""))


def test_same_version_trims_whitespace():
    assert same_version(Component("a", " 1.0 "), Component("a", "1.0"))
    assert not same_version(Component("a", "1.0"), Component("a", "1.0.0"))


def test_same_version_treats_missing_version_as_empty():
    assert same_version(Component("a", None), Component("a", ""))


def test_get_property_matches_names_case_insensitively():
    comp = Component("a", "1", properties=(Property("EFOSS Status", "DENIED"),))
    assert comp.get_property("efossStatus", "efoss status") == "DENIED"
    assert comp.get_property("other") is None


def test_tool_key_is_name_and_vendor():
    assert Tool(name="x", vendor="v", version="1").key == Tool(name="x", vendor="v", version="2").key
