"""
Core comparator module tying a comparison run together.

This module provides the SBomComparator class that handles:
1. Loading the original and the new inventory documents
2. Classifying their components into added, removed and modified
3. Building the derivative document of changed components
4. Rendering the structured diff, the derivative document and the HTML report
5. Writing all artifacts once every rendering has succeeded
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from sbom_comparator.bom_loader import load_bom
from sbom_comparator.bom_writer import serialize_bom
from sbom_comparator.component import Bom
from sbom_comparator.config import ComparatorConfig
from sbom_comparator.derivative import build_derivative
from sbom_comparator.diff_renderers import render_diff
from sbom_comparator.differ import ClassificationResult, classify_boms
from sbom_comparator.exceptions import ConfigurationError
from sbom_comparator.html_report import HtmlReportBuilder
from sbom_comparator.output_writer import write_output
from sbom_comparator.template_manager import TemplateManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparisonArtifacts:
    """What a file comparison produced and where it was written."""

    result: ClassificationResult
    derivative: Bom
    diff_path: Path
    bom_path: Path
    html_path: Path


class SBomComparator:
    """
    Main comparator class.

    This class orchestrates a whole comparison run:
    1. Loading and validating the two input documents
    2. Classifying components
    3. Rendering every output artifact
    4. Writing the artifacts
    """

    def __init__(self, config: Optional[ComparatorConfig] = None):
        """
        Initialize the comparator.

        Args:
            config: Settings of the run, defaults to ComparatorConfig()
        """
        self.config = config or ComparatorConfig()
        self.template_manager = TemplateManager(self.config.template_config)
        self.html_builder = HtmlReportBuilder(self.template_manager)

    def load(self, input_file: Optional[str], role: str) -> Bom:
        if not input_file or not str(input_file).strip():
            raise ConfigurationError(f"No file name provided for the {role} SBom.")
        return load_bom(input_file)

    def compare(self, original: Bom, updated: Bom) -> ClassificationResult:
        return classify_boms(original, updated)

    def compare_files(self, original_file: str, updated_file: str,
                      now: Optional[datetime] = None) -> ComparisonArtifacts:
        """
        Compare two inventory files and write every output artifact.

        Args:
            original_file: Path to the original document
            updated_file: Path to the new document
            now: Time recorded in the derivative document and the report

        Returns:
            ComparisonArtifacts with the result and the written paths

        Raises:
            ConfigurationError: If an input file name is missing
            FileNotFoundError: If an input file does not exist
            SBomComparatorError: If loading, rendering or writing fails
        """
        original = self.load(original_file, "original")
        updated = self.load(updated_file, "new")

        result = self.compare(original, updated)
        derivative = build_derivative(original, updated, result, timestamp=now)

        # Render everything before writing anything
        fmt, pretty = self.config.output_format, self.config.pretty
        diff_text = render_diff(result, fmt, pretty)
        bom_text = serialize_bom(derivative, fmt, pretty)
        html_text = self.html_builder.render(result, original_file, updated_file, generated_at=now)

        artifacts = ComparisonArtifacts(
            result=result,
            derivative=derivative,
            diff_path=write_output(diff_text, self.config.diff_path),
            bom_path=write_output(bom_text, self.config.bom_path),
            html_path=write_output(html_text, self.config.html_path),
        )
        logger.info("Compared %s against %s: %s", original_file, updated_file, result.counts())
        return artifacts
