from datetime import datetime

import pytest

from sbom_comparator.component import Property
from sbom_comparator.differ import classify
from sbom_comparator.exceptions import RenderError
from sbom_comparator.html_report import (
    HtmlReportBuilder,
    adapt_components,
    get_efoss_status,
    version_changes,
)
from sbom_comparator.status import DiffStatus, EfossStatus
from sbom_comparator.template_manager import TemplateManager
from conftest import make_component

GENERATED = datetime(2024, 1, 2, 3, 4, 5)


@pytest.fixture
def result(log4j_old, log4j_new):
    original = [
        log4j_old,
        make_component("junit", "4.12", "junit", properties=(Property("efoss status", "DENIED"),)),
    ]
    updated = [
        log4j_new,
        make_component("Zlib", "1.0", properties=(Property("efossStatus", "UNDER_REVIEW"),)),
        make_component("asm", "9.1", "org.ow2.asm"),
    ]
    return classify(original, updated)


@pytest.fixture
def report(result):
    return HtmlReportBuilder().render(result, "/tmp/boms/OrgSbom.json",
                                      "C:\\boms\\ModifiedSbom.json", generated_at=GENERATED)


def test_row_count_per_status_matches_result(report, result):
    assert report.count("Added</") == len(result.added)
    assert report.count("Removed</") == len(result.removed)
    assert report.count("Modified</") == len(result.modified)


def test_header_names_date_and_documents(report):
    assert "<td>02/01/2024 03:04:05</td><td>OrgSbom.json</td><td>ModifiedSbom.json</td>" in report
    assert report.startswith("<html>")
    assert report.rstrip().endswith("</table></body></html>")


def test_rows_are_sorted_case_insensitively(result):
    assert [v.name for v in adapt_components(result)] == ["asm", "junit", "log4j", "Zlib"]


def test_rows_carry_versions_and_status(result):
    rows = {v.name: v for v in adapt_components(result)}

    assert rows["junit"].status is DiffStatus.REMOVED
    assert (rows["junit"].version_old, rows["junit"].version_new) == ("4.12", "")
    assert rows["asm"].status is DiffStatus.ADDED
    assert (rows["asm"].version_old, rows["asm"].version_new) == ("", "9.1")
    assert rows["log4j"].status is DiffStatus.MODIFIED
    assert (rows["log4j"].version_old, rows["log4j"].version_new) == ("1.2.12", "1.2.17")
    assert rows["Zlib"].group == ""


def test_efoss_status_comes_from_new_side(result):
    rows = {v.name: v for v in adapt_components(result)}
    assert rows["log4j"].efoss_status == ""
    assert rows["junit"].efoss_status == "DENIED"
    assert rows["Zlib"].efoss_status == "UNDER_REVIEW"


def test_efoss_status_defaults_to_empty():
    assert get_efoss_status(make_component("a", "1")) == ""


def test_status_and_efoss_colors(report):
    assert '<td bgcolor="#03AC13"><font color="black">Added</font></td>' in report
    assert '<td bgcolor="red"><font color="white">Removed</font></td>' in report
    assert '<td bgcolor="white"><font color="black">Modified</font></td>' in report
    assert '<td bgcolor="red"><font color="white">DENIED</font></td>' in report
    assert '<td bgcolor="yellow"><font color="black">UNDER_REVIEW</font></td>' in report
    assert '<td bgcolor="white"><font color="black"></font></td>' in report


@pytest.mark.parametrize("value, expected", [
    ("APPROVED", EfossStatus.APPROVED),
    ("APPROVAL_RECOMMENDED", EfossStatus.APPROVAL_RECOMMENDED),
    ("LEGAL_REVIEW_HOLD", EfossStatus.LEGAL_REVIEW_HOLD),
    ("approved", EfossStatus.UNSPECIFIED),
    ("", EfossStatus.UNSPECIFIED),
    (None, EfossStatus.UNSPECIFIED),
])
def test_efoss_status_parse(value, expected):
    assert EfossStatus.parse(value) is expected


def test_version_changes_compare_by_index():
    changes = version_changes("1.2.12", "1.2.17")
    assert [c for c, _ in changes] == list("1.2.17")
    assert [marked for _, marked in changes] == [False, False, False, False, False, True]


def test_longer_new_version_marks_extra_characters():
    changes = version_changes("1.2", "1.2.1")
    assert [marked for _, marked in changes] == [False, False, False, True, True]


def test_missing_old_character_never_matches_a_space():
    assert version_changes("1", "1 ")[1] == (" ", True)
    assert version_changes("", "ab") == [("a", True), ("b", True)]


def test_modified_version_is_highlighted(report):
    assert "<l>1</l><l>.</l><l>2</l><l>.</l><l>1</l><l><mark>7</mark></l>" in report


def test_text_is_escaped():
    result = classify([], [make_component("<script>", "1&2")])
    html_text = HtmlReportBuilder().render(result, "a", "b", generated_at=GENERATED)
    assert "&lt;script&gt;" in html_text
    assert "1&amp;2" in html_text
    assert "<script>" not in html_text


def test_broken_template_raises_render_error(tmp_path, result):
    templates = tmp_path / "templates.yaml"
    templates.write_text("result_row: '<tr>{unknown_field}</tr>'\n", encoding="utf-8")
    builder = HtmlReportBuilder(TemplateManager(str(templates)))

    with pytest.raises(RenderError, match="failed to render HTML report"):
        builder.render(result, "a", "b", generated_at=GENERATED)


def test_template_file_overrides_defaults(tmp_path):
    templates = tmp_path / "templates.yaml"
    templates.write_text("document_footer: '</table><p>end</p></body></html>'\n", encoding="utf-8")
    manager = TemplateManager(str(templates))

    assert manager.get_template("document_footer") == "</table><p>end</p></body></html>"
    assert manager.get_template("version_char") == "<l>{char}</l>"
    assert "not found" in manager.get_template("nope")


@pytest.mark.parametrize("content", ["- a\n- b\n", "key: [unclosed\n"])
def test_invalid_template_file_falls_back_to_defaults(tmp_path, content):
    templates = tmp_path / "templates.yaml"
    templates.write_text(content, encoding="utf-8")
    assert TemplateManager(str(templates)).templates == {}


def test_missing_template_file_uses_defaults(tmp_path):
    manager = TemplateManager(str(tmp_path / "missing.yaml"))
    assert manager.templates == {}
    assert manager.get_template("document_footer") == "</table></body></html>"
