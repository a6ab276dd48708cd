"""
HTML rendering of a classification result.

The report is one self-contained page with two tables: a header table naming
the generation date and both compared documents, and a results table with
one row per changed component, sorted by name without regard to case.
Modified rows highlight every character of the new version that differs
from the old version at the same position.
"""

import html
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from sbom_comparator.bom_loader import display_name
from sbom_comparator.component import Component
from sbom_comparator.differ import ClassificationResult
from sbom_comparator.exceptions import RenderError
from sbom_comparator.status import (
    EFOSS_COLORS,
    EFOSS_PROPERTY_NAMES,
    STATUS_COLORS,
    DiffStatus,
    EfossStatus,
)
from sbom_comparator.template_manager import TemplateManager

logger = logging.getLogger(__name__)

REPORT_TITLE = "Compared Sbom Results"
DATE_FORMAT = "%d/%m/%Y %H:%M:%S"


@dataclass(frozen=True)
class HtmlTableValue:
    """One row of the results table."""

    name: str
    group: str
    version_old: str
    version_new: str
    status: DiffStatus
    efoss_status: str = ""

    @property
    def sort_key(self) -> str:
        return self.name.lower()


def get_efoss_status(component: Component) -> str:
    return component.get_property(*EFOSS_PROPERTY_NAMES) or ""


def adapt_components(result: ClassificationResult) -> List[HtmlTableValue]:
    """Flatten a classification result into table rows sorted by name."""
    values = []
    for comp in result.added:
        values.append(HtmlTableValue(
            name=comp.name, group=comp.group or "", version_old="",
            version_new=comp.version or "", status=DiffStatus.ADDED,
            efoss_status=get_efoss_status(comp)))
    for comp in result.removed:
        values.append(HtmlTableValue(
            name=comp.name, group=comp.group or "", version_old=comp.version or "",
            version_new="", status=DiffStatus.REMOVED,
            efoss_status=get_efoss_status(comp)))
    for pair in result.modified:
        values.append(HtmlTableValue(
            name=pair.current.name, group=pair.current.group or "",
            version_old=(pair.previous.version or "").strip(),
            version_new=(pair.current.version or "").strip(),
            status=DiffStatus.MODIFIED,
            efoss_status=get_efoss_status(pair.current)))
    return sorted(values, key=lambda v: v.sort_key)


def version_changes(version_old: str, version_new: str) -> List[Tuple[str, bool]]:
    """
    Pair each character of ``version_new`` with whether it changed.

    Characters are compared by index. A position past the end of
    ``version_old`` is always a change, even for a space.
    """
    return [(char, i >= len(version_old) or char != version_old[i])
            for i, char in enumerate(version_new)]


class HtmlReportBuilder:
    """Builds the HTML comparison report from str.format templates."""

    def __init__(self, template_manager: Optional[TemplateManager] = None):
        self.template_manager = template_manager or TemplateManager(None)

    def _tpl(self, name: str) -> str:
        return self.template_manager.get_template(name)

    def highlight_version(self, version_old: str, version_new: str) -> str:
        plain, marked = self._tpl("version_char"), self._tpl("version_char_marked")
        return "".join(
            (marked if changed else plain).format(char=html.escape(char))
            for char, changed in version_changes(version_old, version_new)
        )

    def render_row(self, value: HtmlTableValue) -> str:
        status_bg, status_fg = STATUS_COLORS[value.status]
        efoss_bg, efoss_fg = EFOSS_COLORS[EfossStatus.parse(value.efoss_status)]
        if value.status is DiffStatus.MODIFIED:
            version_new = self.highlight_version(value.version_old, value.version_new)
        else:
            version_new = html.escape(value.version_new)
        return self._tpl("result_row").format(
            row_background=status_bg,
            name=html.escape(value.name),
            group=html.escape(value.group),
            version_old=html.escape(value.version_old),
            version_new=version_new,
            status_background=status_bg,
            status_color=status_fg,
            status=value.status.value,
            efoss_background=efoss_bg,
            efoss_color=efoss_fg,
            efoss_status=html.escape(value.efoss_status),
        )

    def render(self, result: ClassificationResult, first_reference: Optional[str],
               second_reference: Optional[str], generated_at: Optional[datetime] = None) -> str:
        """
        Render the full report.

        Args:
            result: Classification to report on
            first_reference: File reference of the original document
            second_reference: File reference of the new document
            generated_at: Date shown in the header table, defaults to now

        Raises:
            RenderError: If a template cannot be filled in
        """
        generated_at = generated_at or datetime.now()
        try:
            parts = [
                self._tpl("document_header").format(title=REPORT_TITLE),
                self._tpl("summary_table").format(
                    date=generated_at.strftime(DATE_FORMAT),
                    first_name=html.escape(display_name(first_reference)),
                    second_name=html.escape(display_name(second_reference)),
                ),
                self._tpl("results_header"),
            ]
            parts.extend(self.render_row(value) for value in adapt_components(result))
            parts.append(self._tpl("document_footer"))
        except (KeyError, IndexError, ValueError) as e:
            logger.error("Failed to fill in the HTML report templates: %s", e)
            raise RenderError(f"failed to render HTML report: {e}") from e
        return "\n".join(parts)
