"""Utility helpers for parsers."""
from __future__ import annotations

import re

import pandas as pd


def format_date(value) -> str:
    """Return ``value`` (ISO timestamp, date or ``DD.MM.YYYY``) as ``DD-MM-YYYY``.

    Timestamps keep their own calendar day; no timezone conversion is done.
    Unparseable or missing values give an empty string.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return ""
    if isinstance(value, str):
        s = value.strip()
        m = re.match(r"(\d{1,2})[./-](\d{1,2})[./-](\d{4})$", s)
        if m:
            d, mth, y = m.groups()
            return f"{int(d):02d}-{int(mth):02d}-{y}"
        m = re.match(r"(\d{4})-(\d{2})-(\d{2})", s)
        if m:
            y, mth, d = m.groups()
            return f"{d}-{mth}-{y}"
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return ""
    return ts.strftime("%d-%m-%Y")


def digits_only(value) -> str:
    """Keep only the digits of ``value`` (``"30 días"`` → ``"30"``)."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return re.sub(r"[^0-9]", "", str(value))
