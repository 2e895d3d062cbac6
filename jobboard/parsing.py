"""Text helpers shared by the provider adapters."""
from __future__ import annotations

import html
import re

_TAG = re.compile(r"<[^>]*>")
_SPACES = re.compile(r"[ \t\xa0]+")
_LINE_EDGES = re.compile(r" ?\n ?")

_ROLE_WORDS = re.compile(r"(?:engineer|developer|designer|manager|lead|senior|junior)", re.IGNORECASE)

COUNTRY_NAMES: dict[str, list[str]] = {
    "IT": ["italy", "italia", "italian", "eu", "europe", "emea"],
    "US": ["usa", "united states", "america", "american"],
    "UK": ["uk", "united kingdom", "britain", "british", "england"],
    "DE": ["germany", "deutschland", "german"],
    "FR": ["france", "french"],
    "ES": ["spain", "spanish", "españa"],
    "NL": ["netherlands", "dutch", "holland"],
}


def strip_html(text: str | None) -> str:
    """Plain text from an HTML fragment.

    Tags become spaces so adjacent blocks keep a word boundary; runs of spaces
    collapse to one, line breaks are kept.
    """
    if not text:
        return ""
    plain = _SPACES.sub(" ", html.unescape(_TAG.sub(" ", text)))
    return _LINE_EDGES.sub("\n", plain).strip()


def parse_company_name(text: str) -> str:
    """Company from an HN header such as ``Acme | Role | Remote``."""
    text = _TAG.sub("", text).strip()

    m = re.match(r"^([^|<\n]+?)(?:\s*\||\s*-\s)", text, re.IGNORECASE)
    if m and len(m.group(1).strip()) <= 50:
        return m.group(1).strip()

    m = re.match(r"^([^|<\n.]+?)\s+(?:is|are)\s+(?:hiring|looking)", text, re.IGNORECASE)
    if m and len(m.group(1).strip()) <= 50:
        return m.group(1).strip()

    m = re.match(
        r"^(.+?)(?=\s*(?:\||hiring|engineer|developer|remote|full-time|part-time))",
        text,
        re.IGNORECASE,
    )
    if m and 2 <= len(m.group(1).strip()) <= 50:
        return m.group(1).strip()

    first_line = text.split("\n")[0].strip()
    if len(first_line) <= 50:
        return first_line
    return first_line[:47] + "..."


def parse_job_location(text: str) -> str | None:
    """Location from ``Company | Location | ...`` or a ``Location:`` line."""
    clean = _TAG.sub("", text)

    m = re.match(r"^[^|]+\|([^|]+)\|", clean)
    if m:
        location = m.group(1).strip()
        if not _ROLE_WORDS.search(location):
            return location

    m = re.search(r"location\s*:\s*([^\n|,]+)", clean, re.IGNORECASE)
    if m:
        return m.group(1).strip()
    return None


def matches_user_location(text: str, locality: str, country: str) -> bool:
    """Whole-word match of the user's city or any name for their country."""
    if locality and re.search(rf"\b{re.escape(locality.lower())}\b", text, re.IGNORECASE):
        return True
    names = COUNTRY_NAMES.get(country.upper(), [country.lower()])
    return any(re.search(rf"\b{re.escape(n)}\b", text, re.IGNORECASE) for n in names)
