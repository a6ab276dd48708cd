"""
Configuration for a comparison run.

Settings come from an optional YAML file (comparator_config.yaml by default)
and may be overridden from the command line. Every key has a default, so a
run without a config file is valid.
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from sbom_comparator.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "comparator_config.yaml"

FORMAT_XML = "xml"
FORMAT_JSON = "json"
AVAILABLE_FORMATS = (FORMAT_XML, FORMAT_JSON)


def parse_output_format(value: Optional[str]) -> str:
    """
    Normalize the output format selector.

    Args:
        value: "xml" or "json" in any case; None selects the default (xml)

    Raises:
        ConfigurationError: For any other value
    """
    if value is None:
        return FORMAT_XML
    fmt = str(value).strip().lower()
    if fmt not in AVAILABLE_FORMATS:
        logger.error("User provided a format of %s, which is invalid.", value)
        raise ConfigurationError(
            "Unrecognized or unsupported output file format. Valid values are xml, json."
        )
    return fmt


def with_suffix(file_name: Optional[str], suffix: str, default: str) -> str:
    """Append ``.suffix`` to ``file_name`` unless it already ends with it."""
    name = file_name.strip() if file_name and file_name.strip() else default
    if not name.lower().endswith("." + suffix.lower()):
        name = f"{name}.{suffix}"
    return name


@dataclass(frozen=True)
class ComparatorConfig:
    """
    Settings of a comparison run.

    Attributes:
        output_format: Format of the diff and derivative document ("xml"/"json")
        output_file: Base name of the structured diff file
        output_bom_file: Base name of the derivative document file
        html_output_file: Base name of the HTML report
        template_config: YAML file holding the HTML report templates
        output_dir: Directory all artifacts are written to
        pretty: Indent the structured outputs for human readers
        log_level: Logging level name for the command line entry point
    """

    output_format: str = FORMAT_XML
    output_file: str = "diff"
    output_bom_file: str = "diffBom"
    html_output_file: str = "sbomcompared"
    template_config: str = "templates.yaml"
    output_dir: str = "."
    pretty: bool = True
    log_level: str = "WARNING"

    def __post_init__(self):
        object.__setattr__(self, "output_format", parse_output_format(self.output_format))

    def merged(self, **overrides: Any) -> "ComparatorConfig":
        """Copy of this config with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @property
    def diff_path(self) -> Path:
        return Path(self.output_dir) / with_suffix(self.output_file, self.output_format, "diff")

    @property
    def bom_path(self) -> Path:
        return Path(self.output_dir) / with_suffix(self.output_bom_file, self.output_format, "diffBom")

    @property
    def html_path(self) -> Path:
        return Path(self.output_dir) / with_suffix(self.html_output_file, "html", "sbomcompared")


def config_from_dict(data: Dict[str, Any]) -> ComparatorConfig:
    known = {f.name for f in fields(ComparatorConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
    return ComparatorConfig(**{k: v for k, v in data.items() if k in known})


def load_config(config_path: Optional[str] = None) -> ComparatorConfig:
    """
    Load settings from a YAML file.

    A missing file yields the defaults. A file that cannot be parsed, or
    whose top level is not a mapping, raises ConfigurationError.
    """
    path = Path(config_path or DEFAULT_CONFIG_FILE)
    if not path.exists():
        logger.info("Config file '%s' not found, using defaults.", path)
        return ComparatorConfig()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Error loading config file '{path}': {e}") from e
    if data is None:
        return ComparatorConfig()
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file '{path}' is not a valid dictionary.")
    return config_from_dict(data)
