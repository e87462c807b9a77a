"""JSON contact export connector."""

import json
import logging
from pathlib import Path

from ..core.models import Lead
from .base import BaseConnector, ImportResult

logger = logging.getLogger(__name__)


class JSONConnector(BaseConnector):
    """Import leads from a JSON array of CRM contacts.

    The file may hold a bare array or an object with a ``contacts`` or
    ``leads`` array. Keys may be camelCase or snake_case.
    """

    source_name = "json"
    suffixes = (".json",)

    def import_from_path(self, path: Path) -> ImportResult:
        result = ImportResult(source=self.source_name)

        error = self.validate_path(path)
        if error:
            result.add_error(error)
            return result

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            result.add_error(f"Error reading JSON: {e}")
            return result

        if isinstance(data, dict):
            data = data.get("contacts", data.get("leads"))

        if not isinstance(data, list):
            result.add_error("Expected a list of contacts or an object with 'contacts' or 'leads'")
            return result

        for index, item in enumerate(data):
            if not isinstance(item, dict):
                result.add_warning(f"Entry {index} is not an object, skipped")
                continue
            try:
                result.leads.append(Lead.from_dict(item))
            except ValueError as e:
                logger.warning(f"Skipping entry {index} of {path.name}: {e}")
                result.add_warning(f"Error parsing entry {index}: {e}")

        if not result.leads:
            result.add_warning("No valid leads found in JSON")

        return result
