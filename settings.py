#Project-level defaults for the analytics engine live in settings.py
import os
from pathlib import Path

# Ensure local ".env" is loaded even for direct Python invocations
# (notebooks, ad-hoc scripts) that skip the application bootstrap.
try:
    from dotenv import load_dotenv

    load_dotenv(Path(__file__).resolve().parent / ".env", override=False)
except ImportError:
    pass


# Offering status thresholds
# Progress values are percentages of target funding; days are whole days to deadline.
STATUS_THRESHOLDS = {
    "funded_progress_pct": float(os.getenv("STATUS_FUNDED_PROGRESS_PCT", "100")),
    "closing_soon_progress_pct": float(os.getenv("STATUS_CLOSING_SOON_PROGRESS_PCT", "80")),
    "closing_soon_days": int(os.getenv("STATUS_CLOSING_SOON_DAYS", "7")),
    "nearly_funded_progress_pct": float(os.getenv("STATUS_NEARLY_FUNDED_PROGRESS_PCT", "90")),  # back-office label only
}

# Range selector lookbacks (days)
RANGE_LOOKBACK_DAYS = {
    "1m": 30,
    "3m": 90,
    "6m": 182,
    "1y": 365,
}

# KPI strip range multipliers
# Applied to distributions and to the gain portion of current value when a
# KPI panel is scoped to a range. Keep in sync with the dashboard copy.
RANGE_MULTIPLIERS = {
    "1m": 0.1,
    "3m": 0.25,
    "6m": 0.5,
    "1y": 0.8,
    "ytd": 0.7,
    "all": 1.0,
}

# Number of trailing months shown in the distributions table per range
DISTRIBUTION_MONTHS_BY_RANGE = {
    "1m": 1,
    "3m": 3,
    "6m": 6,
    "1y": 12,
}

# Risk rating buckets (1-10 scale): <= low_max Low, <= medium_max Medium, else High
RISK_BUCKET_THRESHOLDS = {
    "low_max": float(os.getenv("RISK_BUCKET_LOW_MAX", "3")),
    "medium_max": float(os.getenv("RISK_BUCKET_MEDIUM_MAX", "6")),
}

# CSV export formatting
EXPORT_DEFAULTS = {
    "float_format": os.getenv("ANALYTICS_EXPORT_FLOAT_FORMAT", "%.2f"),
    "line_terminator": "\n",
}

SLOW_OPERATION_SECONDS = float(os.getenv("ANALYTICS_SLOW_OPERATION_SECONDS", "0.5"))
