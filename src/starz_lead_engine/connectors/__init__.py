"""Connectors for loading leads from CRM contact exports."""

from pathlib import Path

from .base import BaseConnector, ImportResult
from .csv_import import CSVConnector
from .json_import import JSONConnector

# Connector registry for CLI
CONNECTORS = {
    "csv": CSVConnector,
    "json": JSONConnector,
}


def get_connector(source: str) -> BaseConnector:
    """Get a connector instance by format name."""
    if source not in CONNECTORS:
        raise ValueError(f"Unknown source: {source}. Available: {list(CONNECTORS.keys())}")
    return CONNECTORS[source]()


def load_leads(path: Path) -> ImportResult:
    """Load leads from a file, picking the connector by file suffix."""
    path = Path(path)
    return get_connector(path.suffix.lower().lstrip(".")).import_from_path(path)


__all__ = [
    "BaseConnector",
    "ImportResult",
    "CSVConnector",
    "JSONConnector",
    "CONNECTORS",
    "get_connector",
    "load_leads",
]
