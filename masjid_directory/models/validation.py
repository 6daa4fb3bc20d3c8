"""Field-level validation for documents, run explicitly before every write.

Each validator returns one message per violated rule so the API can report all
problems with a document at once.
"""

import math
import re
from typing import Any, Dict, List

from masjid_directory.data.enums import CALCULATION_METHODS

PHONE_RE = re.compile(r"^[\+]?[1-9][\d]{0,15}$")
PHONE_STRIP_RE = re.compile(r"[\s\-\(\)]")
EMAIL_RE = re.compile(r"^[A-Z0-9\._+-]+@[A-Z0-9\.-]+\.[A-Z]{2,}$", re.IGNORECASE)
TIME_OF_DAY_RE = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")

PRAYER_NAMES = ("fajr", "dhuhr", "asr", "maghrib", "isha")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)


def _check_range(doc: Dict[str, Any], field: str, label: str, bound: int, errors: List[str]) -> None:
    value = doc.get(field)
    if value is None:
        errors.append(f"{label} is required")
    elif not _is_number(value) or not -bound <= value <= bound:
        errors.append(f"{label} must be between -{bound} and {bound}")


def normalize_masjid(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Trim string fields and lowercase the email, as the store does on write."""
    out = dict(doc)
    for field in ("name", "address", "phone", "email"):
        if isinstance(out.get(field), str):
            out[field] = out[field].strip()
    # Forms submit "" for untouched optional inputs
    for field in ("calculationMethod", "phone", "email", "description"):
        if out.get(field) == "":
            out[field] = None
    if out.get("email"):
        out["email"] = out["email"].lower()
    return out


def validate_masjid(doc: Dict[str, Any]) -> List[str]:
    errors: List[str] = []

    if not doc.get("name"):
        errors.append("Name is required")
    _check_range(doc, "longitude", "Longitude", 180, errors)
    _check_range(doc, "latitude", "Latitude", 90, errors)
    if not doc.get("address"):
        errors.append("Address is required")

    method = doc.get("calculationMethod")
    if method is not None and method not in CALCULATION_METHODS:
        errors.append("Invalid calculation method")

    phone = doc.get("phone")
    if phone and not PHONE_RE.fullmatch(PHONE_STRIP_RE.sub("", phone)):
        errors.append("Invalid phone number format")

    email = doc.get("email")
    if email and not EMAIL_RE.fullmatch(email):
        errors.append("Invalid email format")

    prayer_times = doc.get("prayerTimes") or {}
    for name in PRAYER_NAMES:
        value = prayer_times.get(name)
        if value and not TIME_OF_DAY_RE.fullmatch(value):
            errors.append("Prayer time must be in HH:MM format")

    return errors


def validate_user(doc: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    email = doc.get("email")
    if not email:
        errors.append("Email is required")
    elif not EMAIL_RE.fullmatch(email):
        errors.append("Invalid email address")
    return errors
