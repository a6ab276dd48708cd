"""
Template manager module for the HTML comparison report.

This module provides the TemplateManager class that handles:
1. Loading report templates from a YAML configuration file
2. Falling back to built-in templates for any missing section
3. Providing str.format templates to the HTML report builder
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES: Dict[str, str] = {
    "document_header": (
        '<html><head><meta charset="UTF-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        '<title>{title}</title>'
        '<style>table, th, td {{border: 1px solid black;border-collapse: collapse;}}'
        'table.center {{margin-left:auto;margin-right:auto;}}body{{padding: 3%;}}'
        'h1 {{text-align: center;}}</style></head><body><h1>{title}</h1>'
    ),
    "summary_table": (
        '<table class="center" border="1"><tr bgcolor="#e6e6e6">'
        '<td>Date Created</td><td>First SBom</td><td>Second SBom</td></tr>'
        '<tr><td>{date}</td><td>{first_name}</td><td>{second_name}</td></tr></table><br><br>'
    ),
    "results_header": (
        '<table class="center" border="1"><tr bgcolor="#e6e6e6">'
        '<td>Name</td><td>Group</td><td>Version Old</td><td>Version New</td>'
        '<td>Status</td><td>EFoss Status</td></tr>'
    ),
    "result_row": (
        '<tr bgcolor="{row_background}"><td>{name}</td><td>{group}</td>'
        '<td>{version_old}</td><td>{version_new}</td>'
        '<td bgcolor="{status_background}"><font color="{status_color}">{status}</font></td>'
        '<td bgcolor="{efoss_background}"><font color="{efoss_color}">{efoss_status}</font></td></tr>'
    ),
    "version_char": "<l>{char}</l>",
    "version_char_marked": "<l><mark>{char}</mark></l>",
    "document_footer": "</table></body></html>",
}


class TemplateManager:
    """
    Manages templates for HTML report generation.

    Templates are plain str.format strings keyed by section name. A section
    missing from the configuration file is served from DEFAULT_TEMPLATES.
    """

    def __init__(self, template_config_path: Optional[str] = "templates.yaml"):
        """
        Initialize the template manager.

        Args:
            template_config_path: Path to template configuration file, or
                None to use only the built-in templates
        """
        self.template_config_path = Path(template_config_path) if template_config_path else None
        self.templates = self._load_templates()

    def _load_templates(self) -> Dict[str, str]:
        """
        Load templates from the configuration file.

        Returns:
            Dictionary mapping template section names to their content

        Note:
            Returns empty dict if the file is not found or invalid
        """
        if self.template_config_path is None:
            return {}
        if not self.template_config_path.exists():
            logger.info("Template configuration file '%s' not found. Using built-in templates.",
                        self.template_config_path)
            return {}
        try:
            with open(self.template_config_path, 'r', encoding='utf-8') as f:
                loaded_templates = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Error loading template configuration file '%s': %s. Using built-in templates.",
                           self.template_config_path, e)
            return {}
        if not isinstance(loaded_templates, dict):
            logger.warning("Template configuration file '%s' is not a valid dictionary. Using built-in templates.",
                           self.template_config_path)
            return {}
        return {str(k): str(v) for k, v in loaded_templates.items() if v is not None}

    def get_template(self, template_name: str) -> str:
        """
        Get template content for a specific section.

        Args:
            template_name: Name of the template section

        Returns:
            Template content as string
        """
        template = self.templates.get(template_name)
        if template is None:
            template = DEFAULT_TEMPLATES.get(template_name)
            if template is None:
                return f"[Template '{template_name}' not found]"
        return template
