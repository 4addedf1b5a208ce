"""
Statement layout templates: loading, compilation and detection.
"""
import re
import yaml
from functools import lru_cache
from pathlib import Path
from typing import Dict, Any, Optional, List, Pattern
from rapidfuzz import fuzz
import logging

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT = "itau_checking_v1"
TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

HEADER_FIELDS = ("period", "opening_balance", "closing_balance", "credit_limit", "available_limit")


class StatementLayout:
    """Compiled keywords and anchors of one statement layout."""

    def __init__(self, template_id: str, bank: str,
                 section_start: Pattern, section_end: List[Pattern],
                 balance_contains: List[str], balance_starts_with: List[str],
                 debit_marker: str, credit_marker: str,
                 header_labels: Dict[str, str],
                 must_contain: List[List[str]], fuzzy_threshold: float = 85):
        self.template_id = template_id
        self.bank = bank
        self.section_start = section_start
        self.section_end = section_end
        self.balance_contains = [k.upper() for k in balance_contains]
        self.balance_starts_with = [k.upper() for k in balance_starts_with]
        self.debit_marker = debit_marker.upper()
        self.credit_marker = credit_marker.upper()
        self.header_labels = header_labels
        self.must_contain = must_contain
        self.fuzzy_threshold = fuzzy_threshold

    def __repr__(self):
        return f"StatementLayout('{self.template_id}', bank='{self.bank}')"

    @classmethod
    def from_template(cls, data: Dict[str, Any]) -> "StatementLayout":
        """
        Build a layout from a parsed YAML template.

        Raises:
            ValueError: If a required key is missing or a pattern does not compile
        """
        template_id = data.get('template_id')
        if not template_id:
            raise ValueError("Template has no 'template_id'")

        try:
            section = data['section']
            header = data['header']
            markers = data.get('markers', {})
            page_match = data.get('page_match', {})
            balance_rows = data.get('balance_rows', {})

            missing = [name for name in HEADER_FIELDS if name not in header]
            if missing:
                raise ValueError(f"Template {template_id} is missing header labels: {', '.join(missing)}")

            return cls(
                template_id=template_id,
                bank=data.get('bank', ''),
                section_start=re.compile(section['start'], re.IGNORECASE),
                section_end=[re.compile(r'\b(?:' + p + r')\b', re.IGNORECASE) for p in section.get('end', [])],
                balance_contains=balance_rows.get('contains', []),
                balance_starts_with=balance_rows.get('starts_with', []),
                debit_marker=markers.get('debit', 'D'),
                credit_marker=markers.get('credit', 'C'),
                header_labels={name: header[name] for name in HEADER_FIELDS},
                must_contain=[
                    group if isinstance(group, list) else [group]
                    for group in page_match.get('must_contain', [])
                ],
                fuzzy_threshold=page_match.get('fuzzy_threshold', 85),
            )
        except KeyError as e:
            raise ValueError(f"Template {template_id} is missing required key: {e}")
        except re.error as e:
            raise ValueError(f"Template {template_id} has an invalid pattern: {e}")

    def is_balance_row(self, description: Optional[str]) -> bool:
        """True when the description names a balance row rather than a money movement."""
        if not description:
            return False
        desc = description.upper().strip()
        if any(keyword in desc for keyword in self.balance_contains):
            return True
        return any(desc.startswith(prefix) for prefix in self.balance_starts_with)

    def matches_text(self, text: str) -> bool:
        """Check whether every detection group has a phrase present in the text."""
        if not self.must_contain:
            logger.warning(f"Template {self.template_id} has no 'must_contain' requirements")
            return False

        haystack = text.lower()
        for group in self.must_contain:
            if not any(self._phrase_found(phrase.lower(), haystack) for phrase in group):
                logger.debug(f"Template {self.template_id}: none of {group} found")
                return False
        return True

    def _phrase_found(self, phrase: str, haystack: str) -> bool:
        if phrase in haystack:
            return True
        return fuzz.partial_ratio(phrase, haystack) >= self.fuzzy_threshold


class LayoutRegistry:
    """Loads layout templates from a directory of YAML files."""

    def __init__(self, templates_dir: Path = None):
        self.templates_dir = templates_dir or TEMPLATES_DIR
        self.layouts: Dict[str, StatementLayout] = {}
        self._load_templates()

    def _load_templates(self):
        """Load all available templates."""
        if not self.templates_dir.exists():
            logger.warning(f"Templates directory not found: {self.templates_dir}")
            return

        for yaml_file in sorted(self.templates_dir.glob("*.yaml")):
            try:
                with open(yaml_file, 'r', encoding='utf-8') as f:
                    template_data = yaml.safe_load(f) or {}
                layout = StatementLayout.from_template(template_data)
            except (OSError, yaml.YAMLError, ValueError) as e:
                logger.error(f"Error loading template {yaml_file}: {e}")
                continue
            self.layouts[layout.template_id] = layout
            logger.debug(f"Loaded template: {layout.template_id}")

    def get_layout(self, template_id: str) -> StatementLayout:
        """
        Get a layout by template ID.

        Raises:
            ValueError: If no template with that ID was loaded
        """
        layout = self.layouts.get(template_id)
        if layout is None:
            raise ValueError(f"Template not found: {template_id}")
        return layout

    def list_layouts(self) -> List[str]:
        """List all available template IDs."""
        return list(self.layouts.keys())

    def detect(self, text: Optional[str]) -> Optional[str]:
        """
        Detect which layout the extracted text belongs to.

        Args:
            text: Extracted statement text

        Returns:
            Template ID if found, None otherwise
        """
        if not text or not text.strip():
            return None

        for template_id, layout in self.layouts.items():
            if layout.matches_text(text):
                logger.info(f"Text matches template: {template_id}")
                return template_id

        logger.warning("No matching template found")
        return None


@lru_cache(maxsize=None)
def default_registry() -> LayoutRegistry:
    """Registry over the packaged templates, loaded once per process."""
    return LayoutRegistry()


def get_layout(template_id: str = DEFAULT_LAYOUT) -> StatementLayout:
    """Convenience accessor for a packaged layout."""
    return default_registry().get_layout(template_id)


def detect_layout(text: Optional[str]) -> Optional[str]:
    """
    Convenience function to detect the layout of extracted statement text.

    Args:
        text: Extracted statement text

    Returns:
        Template ID if found, None otherwise
    """
    return default_registry().detect(text)
