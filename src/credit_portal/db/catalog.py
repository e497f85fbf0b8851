"""Subject catalog seeding from YAML.

Expected format (data/catalog/subjects_v1.yaml):

    subjects:
      - semester: 1
        code: FEC101
        name: Engineering Mathematics-I
        mode: Theory
        credits: 4
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
import yaml

from credit_portal.core.models import Subject

if TYPE_CHECKING:
    from credit_portal.core.store import ProgressStore

logger = structlog.get_logger(__name__)

DEFAULT_CATALOG = Path("data/catalog/subjects_v1.yaml")


class CatalogError(Exception):
    """Raised when a catalog file is malformed."""

    pass


def parse_subjects(data: dict[str, Any]) -> list[Subject]:
    """Parse catalog data into Subject objects (ids assigned on insert).

    Raises:
        CatalogError: If an entry is missing fields or has invalid values
    """
    entries = data.get("subjects")
    if not isinstance(entries, list):
        raise CatalogError("Catalog must contain a 'subjects' list")

    subjects = []
    for i, entry in enumerate(entries, start=1):
        try:
            subjects.append(
                Subject(
                    subject_id=0,
                    semester=int(entry["semester"]),
                    code=str(entry["code"]),
                    name=str(entry["name"]),
                    mode_of_study=str(entry.get("mode", "")),
                    credits=int(entry["credits"]),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"Invalid subject entry #{i}: {e}") from e

    return subjects


def load_subjects_yaml(path: Path) -> list[Subject]:
    """Load and parse a catalog YAML file."""
    if not path.exists():
        raise FileNotFoundError(f"Catalog not found: {path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return parse_subjects(data)


def import_subjects(store: ProgressStore, path: Path) -> list[Subject]:
    """Insert (or update) every subject of a catalog file.

    Returns:
        The stored subjects with their ids
    """
    stored = [store.insert_subject(subject) for subject in load_subjects_yaml(path)]
    logger.info("catalog.imported", source=str(path), subjects=len(stored))
    return stored
