"""Pytest configuration.

Puts the repo root on sys.path so `donor_analytics` imports without an install,
and provides shared donor fixtures.
"""

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from donor_analytics.data.schemas import SourceExtract  # noqa: E402


@pytest.fixture
def fy_sources():
    """Three extracts in merge order, shaped like the real fiscal-year exports."""
    fy21 = SourceExtract("FY21.xlsx", [
        {"VANID": "V1", "FY20": 1000, "FY21": 1100, "MidRange_1 0004999_(Public)": 0},
        {"VANID": "V2", "FY20": 5000, "FY21": 5000, "Major_Donor_Prospect_(Public)": 1},
        {"VANID": "", "FY20": 999},
    ])
    fy22 = SourceExtract("FY22.xlsx", [
        {" vanid ": "V1", "FY22": "$1,150.00", "MidRange_1 0004999_(Public)": "TRUE"},
        {" vanid ": "V3", "FY22": 250},
    ])
    fy23 = SourceExtract("FY23.xlsx", [
        {"VANID": "V1", "FY23": None, "FY24": 1200, "FY25": 1300, "MidRange_1 0004999_(Public)": 0},
        {"VANID": "V2", "FY24": 6000, "FY25": 0},
        {"VANID": "V3", "FY24": "n/a", "FY25": 800},
    ])
    return [fy21, fy22, fy23]
