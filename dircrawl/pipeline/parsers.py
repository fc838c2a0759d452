"""
Field Parsers - normalize noisy directory text into structured sub-fields.

Pure functions: no I/O, no browser. Every parser is total and returns a
best-effort result (empty strings when nothing usable is found).
"""
from __future__ import annotations

import re
from typing import Any, Dict

# "<city>, <ST> <zip5[-4]>" on a single line
CITY_STATE_ZIP_LINE_RE = re.compile(r"^(.+?),?\s+([A-Z]{2})\s+(\d{5}(?:-\d{4})?)$", re.IGNORECASE)
EMAIL_RE = re.compile(r"[\w.-]+@[\w.-]+\.\w+")
PHONE_STRIP_RE = re.compile(r"[^\d\-().\s+]")
MIDDLE_INITIAL_RE = re.compile(r"^[^\s.]\.?$")


def parse_name(full_name: str | None) -> Dict[str, str]:
    """Split a display name into first name, middle initial and last name.

    - one token: first name only
    - two tokens: first / last
    - three or more: the second token contributes a middle initial, the
      remaining tokens form the last name
    """
    parts = (full_name or "").split()
    if not parts:
        return {"first_name": "", "middle_initial": "", "last_name": ""}
    if len(parts) == 1:
        return {"first_name": parts[0], "middle_initial": "", "last_name": ""}
    if len(parts) == 2:
        return {"first_name": parts[0], "middle_initial": "", "last_name": parts[1]}
    middle = parts[1]
    if MIDDLE_INITIAL_RE.match(middle):
        initial = middle.rstrip(".")
    else:
        initial = middle[0]
    return {"first_name": parts[0], "middle_initial": initial, "last_name": " ".join(parts[2:])}


def parse_address(text: str | None) -> Dict[str, str]:
    """Parse a multi-line address block.

    The first line is address1. When the last line looks like
    "City, ST 12345" it fills city/state/zip and the lines in between become
    address2; otherwise every line after the first is address2.
    """
    out = {"address1": "", "address2": "", "city": "", "state": "", "zip": ""}
    lines = [ln.strip() for ln in (text or "").splitlines()]
    lines = [ln for ln in lines if ln]
    if not lines:
        return out
    out["address1"] = lines[0]
    if len(lines) < 2:
        return out
    m = CITY_STATE_ZIP_LINE_RE.match(lines[-1])
    if m:
        out["city"] = m.group(1).strip()
        out["state"] = m.group(2).upper()
        out["zip"] = m.group(3)
        out["address2"] = ", ".join(lines[1:-1])
    else:
        out["address2"] = ", ".join(lines[1:])
    return out


def clean_phone(text: str | None) -> str:
    """Keep digits and the usual phone punctuation only."""
    if not text:
        return ""
    return PHONE_STRIP_RE.sub("", text).strip()


def clean_email(text: str | None) -> str:
    """Return the first email-shaped substring, lower-cased, or ''."""
    if not text:
        return ""
    m = EMAIL_RE.search(text)
    return m.group(0).lower() if m else ""


def escape_csv(value: Any) -> str:
    """Quote a CSV field when it contains a comma, a quote or a newline."""
    if value is None:
        return ""
    s = str(value)
    if "," in s or '"' in s or "\n" in s:
        return '"' + s.replace('"', '""') + '"'
    return s
