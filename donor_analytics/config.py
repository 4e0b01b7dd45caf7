"""
Donor Analytics — Configuration: paths, fiscal years, column aliases, tier tables.
"""
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths: override with DONOR_DATA_DIR env var
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("DONOR_DATA_DIR", str(Path.home() / "Desktop" / "Donor Analytics")))
BASE_FOLDER = _data_dir
INBOX_FOLDER = _data_dir / "inbox"
REPORTS_FOLDER = _data_dir / "reports"

# ---------------------------------------------------------------------------
# Source extracts, applied in this order (later files win on non-null amounts)
# ---------------------------------------------------------------------------
SOURCE_FILES = ["FY20.xlsx", "FY21.xlsx", "FY22.xlsx", "FY23.xlsx"]
SOURCE_EXTENSIONS = {".xlsx", ".xls", ".csv"}

# ---------------------------------------------------------------------------
# Fiscal years (newest first by convention)
# ---------------------------------------------------------------------------
FISCAL_YEARS = ["FY25", "FY24", "FY23", "FY22", "FY21", "FY20"]
CHRONOLOGICAL_YEARS = list(reversed(FISCAL_YEARS))

# ---------------------------------------------------------------------------
# Column alias registry: canonical field → accepted headers (first match wins).
# Headers are compared trimmed and lowercased.
# ---------------------------------------------------------------------------
IDENTIFIER_FIELD = "van_id"
FLAG_FIELDS = ["is_mid_range", "is_major_donor_prospect"]

COLUMN_ALIASES = {
    "van_id": ["VANID", "VAN ID", "Van_ID"],
    "FY25": ["FY25", "FY 25", "FY2025"],
    "FY24": ["FY24", "FY 24", "FY2024"],
    "FY23": ["FY23", "FY 23", "FY2023"],
    "FY22": ["FY22", "FY 22", "FY2022"],
    "FY21": ["FY21", "FY 21", "FY2021"],
    "FY20": ["FY20", "FY 20", "FY2020"],
    "is_mid_range": ["MidRange_1 0004999_(Public)", "MidRange"],
    "is_major_donor_prospect": ["Major_Donor_Prospect_(Public)", "Major Donor Prospect"],
}

# Cell text counted as a true flag (compared lowercased)
TRUTHY_FLAG_VALUES = {"1", "true", "yes", "y", "x"}

# ---------------------------------------------------------------------------
# Tier tables: (label, inclusive lower bound), highest bound first
# ---------------------------------------------------------------------------
NO_GIFT_LABEL = "No Gift"

GIVING_TIERS = [
    ("$5K+", 5000),
    ("$1K-$4.9K", 1000),
    ("$500-$999", 500),
    ("<$500", 0),
]

# Coarser ranking used for tier-movement reporting
RANK_TIERS = [
    ("Tier 1", 10000),
    ("Tier 2", 5000),
    ("Tier 3", 1000),
    ("Tier 4", 0),
]

# ---------------------------------------------------------------------------
# Trend thresholds
# ---------------------------------------------------------------------------
CONSISTENT_THRESHOLD_PCT = 10.0   # |first→last change| below this is "consistent"
PATTERN_BAND = 0.10               # giving pattern: every gift within ±10% of mean
TRANSITION_YEARS = ("FY24", "FY25")
MID_RANGE_THRESHOLD = 1000
