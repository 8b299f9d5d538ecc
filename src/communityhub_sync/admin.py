"""Admin editor for the field mapping table.

Renders one pair of text inputs per mapping entry plus a blank trailing row,
and turns a submitted form back into a mapping table. Malformed rows are
dropped silently.
"""

from __future__ import annotations

import html
import re
from typing import Any

import msgspec

from .logging_config import get_logger
from .mapping import REMOTE_KEY, FieldMapping

logger = get_logger("admin")

MAPPING_FIELD_NAME = "field_mapping"
LOCAL_KEY = "local_key"
REMOTE_FORM_KEY = "remote_key"

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_text(value: Any) -> str:
    """Reduce a submitted value to a single line of plain text."""
    if not isinstance(value, str):
        return ""
    value = _TAG_RE.sub("", value)
    return _WHITESPACE_RE.sub(" ", value).strip()


class MappingRow(msgspec.Struct, frozen=True):
    """One editable row of the mapping form."""

    index: int
    local_key: str
    remote_key: str
    local_field: str
    remote_field: str


class MappingEditor:
    """Form I/O for a FieldMapping."""

    def __init__(self, mapping: FieldMapping) -> None:
        """Initialize the editor for a mapping table."""
        self.mapping = mapping

    def _field_name(self, index: int, key: str) -> str:
        """Form field name, e.g. ``...[field_mapping][0][local_key]``."""
        return f"{self.mapping.option_name}[{MAPPING_FIELD_NAME}][{index}][{key}]"

    def _row(self, index: int, local_key: str = "", remote_key: str = "") -> MappingRow:
        """Build one form row with its field names."""
        return MappingRow(
            index=index,
            local_key=local_key,
            remote_key=remote_key,
            local_field=self._field_name(index, LOCAL_KEY),
            remote_field=self._field_name(index, REMOTE_FORM_KEY),
        )

    def rows(self) -> list[MappingRow]:
        """Existing entries in order, followed by one blank row."""
        rows = [
            self._row(index, local_key, self.mapping.remote_key(local_key))
            for index, local_key in enumerate(self.mapping.keys())
        ]
        rows.append(self._row(len(rows)))
        return rows

    def render(self) -> str:
        """Render the rows as HTML inputs with escaped names and values.

        Returns:
            HTML fragment, one ``div.mapping-row`` per row
        """
        parts = []
        for row in self.rows():
            local_field = html.escape(row.local_field, quote=True)
            remote_field = html.escape(row.remote_field, quote=True)
            parts.append(
                '<div class="mapping-row">\n'
                f'  <label for="{local_field}">Local Key</label>\n'
                f'  <input type="text" id="{local_field}" name="{local_field}"'
                f' value="{html.escape(row.local_key, quote=True)}">\n'
                f'  <label for="{remote_field}">Remote Key</label>\n'
                f'  <input type="text" id="{remote_field}" name="{remote_field}"'
                f' value="{html.escape(row.remote_key, quote=True)}">\n'
                "</div>"
            )
        return "\n".join(parts)

    def format_settings(self, form: Any) -> dict[str, dict[str, str]]:
        """Convert submitted rows into a mapping table.

        Accepts either ``{"field_mapping": rows}`` or the rows themselves,
        where rows is a list or a dict keyed by row index.
        """
        if isinstance(form, dict) and MAPPING_FIELD_NAME in form:
            form = form[MAPPING_FIELD_NAME]
        if isinstance(form, dict):
            rows = list(form.values())
        elif isinstance(form, list):
            rows = form
        else:
            return {}

        mapping: dict[str, dict[str, str]] = {}
        for row in rows:
            if not isinstance(row, dict):
                continue
            local_key = sanitize_text(row.get(LOCAL_KEY))
            remote_key = sanitize_text(row.get(REMOTE_FORM_KEY))
            if not local_key or not remote_key:
                continue
            mapping[local_key] = {REMOTE_KEY: remote_key}
        return mapping

    def save(self, form: Any) -> dict[str, dict[str, str]]:
        """Replace the stored mapping with the submitted rows."""
        mapping = self.format_settings(form)
        self.mapping.replace(mapping)
        self.mapping.save()
        logger.info("Saved field mapping with %d entries", len(mapping))
        return mapping
