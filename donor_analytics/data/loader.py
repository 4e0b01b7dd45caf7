"""
Source extract discovery and loading (Excel / CSV → row lists).
"""
from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from donor_analytics.config import INBOX_FOLDER, SOURCE_FILES, SOURCE_EXTENSIONS
from donor_analytics.data.schemas import SourceExtract

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

def discover_sources(
    inbox: Path = INBOX_FOLDER,
    file_names: list[str] | None = None,
) -> list[Path]:
    """Return source paths in merge order.

    With file_names (default SOURCE_FILES) the configured order is kept and
    missing files are logged. Pass an empty list to pick up every supported
    file in the inbox, sorted by name.
    """
    if file_names is None:
        file_names = SOURCE_FILES

    if not file_names:
        if not inbox.exists():
            return []
        return sorted(
            (p for p in inbox.iterdir() if p.suffix.lower() in SOURCE_EXTENSIONS),
            key=lambda p: p.name,
        )

    paths: list[Path] = []
    for name in file_names:
        path = inbox / name
        if path.exists():
            paths.append(path)
        else:
            logger.warning("Source file not found: %s", path)
    return paths


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def read_frame(path: Path) -> pd.DataFrame:
    """Read the first sheet of a workbook, or a CSV, keeping cells as raw objects."""
    if path.suffix.lower() == ".csv":
        return pd.read_csv(path, dtype=object)
    return pd.read_excel(path, sheet_name=0, dtype=object)


def frame_to_rows(df: pd.DataFrame) -> list[dict]:
    """Convert a DataFrame into header → cell rows with string headers."""
    df = df.rename(columns=lambda c: str(c))
    return df.to_dict("records")


def load_source(path: Path) -> SourceExtract:
    return SourceExtract(name=path.name, rows=frame_to_rows(read_frame(path)))


def load_sources(paths: list[Path]) -> list[SourceExtract]:
    """Load every path in order.

    An unreadable file becomes an empty extract so the reconciler records it
    as a skipped source instead of dropping it from the coverage report.
    """
    extracts = []
    for path in paths:
        try:
            extract = load_source(path)
        except Exception as exc:
            logger.warning("Could not read %s: %s", path.name, exc)
            extract = SourceExtract(name=path.name)
        else:
            logger.info("Loaded %s: %d rows", path.name, len(extract.rows))
        extracts.append(extract)
    return extracts
