"""CSV contact export connector."""

import csv
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.models import Lead
from .base import BaseConnector, ImportResult

logger = logging.getLogger(__name__)


class CSVConnector(BaseConnector):
    """Import leads from CSV contact exports."""

    source_name = "csv"
    suffixes = (".csv",)

    # Lead field -> accepted column names (matched case-insensitively)
    COLUMN_MAPPINGS = {
        "id": ["id", "contact_id", "lead_id"],
        "first_name": ["first_name", "firstname", "first name", "given_name"],
        "last_name": ["last_name", "lastname", "last name", "surname"],
        "company": ["company", "company_name", "business", "business_name"],
        "position": ["position", "title", "job_title", "role"],
        "phone": ["phone", "phone_number", "phonenumber", "mobile", "cell", "telephone"],
        "email": ["email", "email_address", "e-mail", "emailaddress"],
        "notes": ["notes", "note", "description", "comments"],
        "company_size": ["company_size", "companysize", "company size", "size"],
        "budget": ["budget", "budget_cents"],
        "deal_value": ["deal_value", "dealvalue", "deal value", "deal_value_cents"],
        "timeline": ["timeline", "purchase_timeline"],
        "lead_source": ["lead_source", "leadsource", "lead source", "source"],
        "lead_status": ["lead_status", "leadstatus", "lead status", "status"],
        "pipeline_stage": ["pipeline_stage", "pipelinestage", "pipeline stage", "stage"],
        "last_contacted_at": ["last_contacted_at", "lastcontactedat", "last contacted", "last_contacted"],
    }

    def import_from_path(self, path: Path) -> ImportResult:
        """Import from a CSV file."""
        result = ImportResult(source=self.source_name)

        error = self.validate_path(path)
        if error:
            result.add_error(error)
            return result

        try:
            result = self._import_with_encoding(path, 'utf-8-sig')
        except UnicodeDecodeError:
            logger.info(f"{path} is not UTF-8, retrying as latin-1")
            try:
                result = self._import_with_encoding(path, 'latin-1')
            except (OSError, csv.Error) as e:
                result = ImportResult(source=self.source_name)
                result.add_error(f"Could not read CSV with any encoding: {e}")
        except (OSError, csv.Error) as e:
            result.add_error(f"Error reading CSV: {e}")

        return result

    def _import_with_encoding(self, path: Path, encoding: str) -> ImportResult:
        """Import with specific encoding."""
        result = ImportResult(source=self.source_name)

        with open(path, 'r', encoding=encoding, newline='') as f:
            # Try to detect delimiter
            sample = f.read(4096)
            f.seek(0)

            try:
                dialect = csv.Sniffer().sniff(sample, delimiters=",;\t|")
            except csv.Error:
                dialect = csv.excel  # Default to standard CSV

            reader = csv.DictReader(f, dialect=dialect)

            if not reader.fieldnames:
                result.add_error("CSV file has no headers")
                return result

            column_map = self._map_columns(reader.fieldnames)
            if not column_map:
                result.add_warning(
                    f"Could not map any lead columns. Headers found: {reader.fieldnames}"
                )

            row_num = 1
            for row in reader:
                row_num += 1
                try:
                    lead = self._parse_row(row, column_map)
                except ValueError as e:
                    logger.warning(f"Skipping row {row_num} of {path.name}: {e}")
                    result.add_warning(f"Error parsing row {row_num}: {e}")
                    continue
                if lead:
                    result.leads.append(lead)

        if not result.leads:
            result.add_warning("No valid leads found in CSV")

        return result

    def _map_columns(self, fieldnames: List[str]) -> Dict[str, str]:
        """Map CSV columns to lead field names."""
        column_map = {}
        fieldnames_lower = {f.lower().strip(): f for f in fieldnames if f}

        for field_name, possible_names in self.COLUMN_MAPPINGS.items():
            for possible in possible_names:
                if possible in fieldnames_lower:
                    column_map[field_name] = fieldnames_lower[possible]
                    break

        return column_map

    def _parse_row(self, row: Dict[str, Any], column_map: Dict[str, str]) -> Optional[Lead]:
        """Parse a single CSV row into a Lead. Blank rows give None."""
        values = {}
        for field_name, column in column_map.items():
            value = (row.get(column) or "").strip()
            if value:
                values[field_name] = value

        if not values:
            return None

        if "email" in values:
            values["email"] = values["email"].lower()

        return Lead.from_dict(values)
