"""Base connector class for lead imports."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..core.models import Lead


@dataclass
class ImportResult:
    """Result of an import operation."""

    source: str
    leads: List[Lead] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    success: bool = True

    @property
    def count(self) -> int:
        """Number of leads imported."""
        return len(self.leads)

    def add_error(self, error: str):
        """Add an error and mark as failed."""
        self.errors.append(error)
        self.success = False

    def add_warning(self, warning: str):
        """Add a warning (doesn't fail import)."""
        self.warnings.append(warning)


class BaseConnector(ABC):
    """Base class for all import connectors."""

    source_name: str = "unknown"
    suffixes: tuple = ()

    @abstractmethod
    def import_from_path(self, path: Path) -> ImportResult:
        """Import leads from a file path."""
        pass

    def validate_path(self, path: Path) -> Optional[str]:
        """Validate the import path. Returns error message or None."""
        if not path.exists():
            return f"Path does not exist: {path}"
        if not path.is_file():
            return f"Not a file: {path}"
        if self.suffixes and path.suffix.lower() not in self.suffixes:
            return f"Expected {' or '.join(self.suffixes)} file, got: {path.suffix or '(none)'}"
        return None
