"""Classify job postings by geographic availability from free text.

The classifier is an ordered cascade of regex rule stages; the first decisive
stage wins:

  1. multi-role posts whose roles span different location types -> MIXED_ROLES
  2. hybrid phrasing without a global-remote phrase             -> HYBRID
  3. explicit on-site phrasing without a global-remote phrase   -> ON_SITE
  4. global-remote phrasing with no regional focus              -> REMOTE_GLOBAL
  5. any remote mention with a regional focus                   -> REMOTE_REGIONAL
  6. city names only                                            -> ON_SITE
     otherwise                                                  -> UNKNOWN

Regions are split into primary (explicitly targeted) and secondary (listed as
an option after another region); a region is never both.
"""
from __future__ import annotations

import re
from typing import Literal

from jobboard.models import ParsedLocationData, RoleBreakdown

_I = re.IGNORECASE

LocationFilter = Literal["all", "remote-global", "remote-region", "onsite-region", "any-region"]
LOCATION_FILTERS: tuple[str, ...] = (
    "all", "remote-global", "remote-region", "onsite-region", "any-region",
)

COUNTRY_TO_REGION: dict[str, str] = {
    # Europe (UK grouped with EU for remote work)
    "IT": "EU", "DE": "EU", "FR": "EU", "ES": "EU", "NL": "EU", "PT": "EU",
    "PL": "EU", "BE": "EU", "AT": "EU", "SE": "EU", "DK": "EU", "FI": "EU",
    "IE": "EU", "GR": "EU", "CZ": "EU", "HU": "EU", "RO": "EU", "CH": "EU",
    "NO": "EU", "UK": "EU", "GB": "EU",
    # Americas
    "US": "Americas", "CA": "Americas", "MX": "Americas", "BR": "Americas",
    "AR": "Americas", "CL": "Americas", "CO": "Americas",
    # Asia-Pacific
    "AU": "APAC", "NZ": "APAC", "JP": "APAC", "SG": "APAC", "IN": "APAC",
    "CN": "APAC", "KR": "APAC", "HK": "APAC", "TW": "APAC",
    # Middle East / Africa
    "IL": "MENA", "AE": "MENA", "ZA": "MENA",
}

_REGION_LABELS: dict[str, str] = {
    "EU": "EU",
    "Americas": "Americas",
    "APAC": "Asia-Pacific",
    "MENA": "MENA",
    "Global": "Global",
}


def get_region_from_country(country_code: str) -> str:
    return COUNTRY_TO_REGION.get(country_code.upper(), "Global")


def get_region_label(region: str) -> str:
    return _REGION_LABELS.get(region, region)


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, _I) for p in patterns)


def _any(patterns: tuple[re.Pattern[str], ...], text: str) -> bool:
    return any(p.search(text) for p in patterns)


# ---------------------------------------------------------------------------
# Work-arrangement phrasing
# ---------------------------------------------------------------------------

REMOTE_PATTERNS = _compile(
    r"\bremote\b",
    r"\bfully remote\b",
    r"\b100% remote\b",
    r"\bwork from home\b",
    r"\bwfh\b",
    r"\bremote[- ]first\b",
    r"\bremote[- ]friendly\b",
    r"\bdistributed team\b",
    r"\banywhere\b",
    r"\bworldwide\b",
)

ON_SITE_PATTERNS = _compile(
    r"\b(?:onsite|on[- ]site)\b",
    r"\bin[- ]?person\b",
    r"\bin[- ]?office\b",
    r"\boffice[- ]first\b",
    r"\boffice[- ]based\b",
    r"\bno\s*remote\b",
    r"\bremote\s*(?:not|isn't|is not)\s*(?:available|possible|an option)\b",
    r"\bmust\s*(?:be\s*)?(?:work|based)\s*(?:in|from)\s*(?:our\s*)?(?:office|hq)\b",
)

HYBRID_PATTERNS = _compile(
    r"\bhybrid\b",
    r"\bflexible\s*(?:remote|wfh|work from home)\b",
    r"\b(?:remote|wfh)\s*(?:1|2|3)\s*days?\s*(?:a\s*)?week\b",
    r"\bpartially\s*remote\b",
    r"\bremote\s*optional\b",
)

REMOTE_GLOBAL_PATTERNS = _compile(
    r"\bfully\s*remote\b",
    r"\b100%\s*remote\b",
    r"\bremote[- ]first\b",
    r"\bremote\s*(?:anywhere|worldwide|global)\b",
    r"\bwork\s*from\s*anywhere\b",
    r"\bdistributed\s*(?:team|company)\b",
    r"\basync[- ]first\b",
    r"\bglobal(?:ly)?\s*(?:remote|distributed)\b",
    r"\b(?:worldwide|international|global)\s*(?:team|company|remote)\b",
)

_REMOTE_WORD = re.compile(r"\bremote\b", _I)
_SEGMENT_REMOTE = re.compile(r"\bremote\s*(?:friendly|optional)?\b", _I)

# ---------------------------------------------------------------------------
# Regional intent
# ---------------------------------------------------------------------------

EU_PRIMARY_PATTERNS = _compile(
    r"\bremote\s*\(\s*(?:eu|europe|emea)\s*(?:only)?\s*\)",
    r"\bremote\s*[-,]\s*(?:eu|europe|emea)\s*only\b",
    r"\b(?:eu|europe|emea)[- ]based\s*remote\b",
    r"\b(?:eu|europe|emea)\s*remote\b",
    r"\bremote\s*\(\s*europe\s*only\s*\)",
    r"\beu\s*(?:preferred|timezone|hours)\b",
    r"\beuropean\s*(?:timezone|hours|candidates?)\s*(?:only|preferred|required)\b",
)

US_PRIMARY_PATTERNS = _compile(
    r"\bremote\s*\(\s*(?:us|usa|united states)\s*(?:only)?\s*\)",
    r"\b(?:us|usa)\s+remote\b",
    r"\b(?:us|usa|united states)[- ]based\s*remote\b",
    r"\bremote\s*\(\s*(?:us|usa)\s*[,/]\s*canada\s*\)",
    r"\bremote\s*\(\s*north\s*america[^)]*\)",
    r"\b(?:us|america(?:n)?)\s*(?:timezone|hours|time\s*zone)s?\b",
    r"\b(?:est|pst|cst|mst|pt|et|ct|mt)[/-](?:est|pst|cst|mst|pt|et|ct|mt)\b",
    r"\bgmt[- ]?[45678]\b",
    r"\bfull[- ]?time\s*\(\s*(?:us|usa)\s*(?:timezone|hours|time\s*zone)s?\s*\)",
    r"\b(?:legal(?:ly)?|authorized?|eligible)\s+to\s+work\s+in\s+(?:the\s+)?(?:us|usa|united states)\b",
    r"\bmust\s+(?:be\s+)?(?:legally\s+)?(?:authorized?|eligible)\s+(?:to\s+work\s+)?in\s+(?:the\s+)?(?:us|usa|united states)\b",
    r"\|\s*united states\s*\|",
)

# EU listed after a US/Americas focus
EU_SECONDARY_PATTERNS = _compile(
    r"\bremote\s*\(\s*(?:us|usa)\s*[,/]\s*canada\s*[,/]\s*(?:europe|eu)\s*\)",
    r"\b(?:us|usa|united states)\s*(?:or|/|,)\s*(?:europe|eu)\b",
    r"\b(?:americas?|north\s*america)\s*(?:and|&|,)\s*(?:europe|eu)\b",
    r"\b(?:us|usa)\s*(?:primarily|mainly|preferred).*?(?:europe|eu)\b",
    r"\b(?:open to|consider(?:ing)?|possible(?:ly)?)\s*(?:europe|eu)\b",
    r"\boptional\s*hubs?\s*(?:sf|san francisco|nyc|new york|toronto)",
)

EXCLUSION_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bno\s+(?:us|usa|united states)\s*citizen", _I), "Americas"),
    (re.compile(r"\bexcluding\s+(?:eu|europe)\b", _I), "EU"),
    (re.compile(r"\bnot\s+available\s+(?:in\s+)?(?:eu|europe)\b", _I), "EU"),
)

# First matching rule decides which regions a remote posting is open to.
_ALL_REGIONS = ("EU", "Americas", "APAC", "MENA", "Global")
REGION_RESTRICTIONS: tuple[tuple[re.Pattern[str], tuple[str, ...]], ...] = (
    (re.compile(
        r"\b(?:us[- ]?only|usa[- ]?only|united states[- ]?only|us[- ]?based[- ]?only"
        r"|must be (?:in|based in) (?:the )?us)\b", _I), ("Americas",)),
    (re.compile(r"\bremote\s*\(?\s*us\s*(?:only)?\s*\)?", _I), ("Americas",)),
    (re.compile(
        r"\b(?:eu[- ]?only|europe[- ]?only|european[- ]?only|emea[- ]?only"
        r"|must be (?:in|based in) (?:the )?eu)\b", _I), ("EU",)),
    (re.compile(r"\bremote\s*\(?\s*(?:eu|europe|emea)\s*(?:only)?\s*\)?", _I), ("EU",)),
    (re.compile(
        r"\b(?:americas[- ]?only|north\s*america[- ]?only|us/canada|us\s*(?:and|or|/)\s*canada)\b",
        _I), ("Americas",)),
    (re.compile(r"\b(?:apac[- ]?only|asia[- ]?pacific[- ]?only)\b", _I), ("APAC",)),
    (re.compile(r"\b(?:us\s*time\s*zones?|est|pst|cst|mst)\s*(?:only|required)\b", _I), ("Americas",)),
    (re.compile(
        r"\b(?:cet|european\s*time\s*zones?|gmt(?:\s*\+?\s*[0-2])?)\s*(?:only|required)\b",
        _I), ("EU",)),
    (re.compile(
        r"\b(?:fully\s*remote|remote\s*(?:anywhere|worldwide|global)|work\s*from\s*anywhere)\b",
        _I), _ALL_REGIONS),
)

GLOBAL_AVAILABILITY_PATTERNS = _compile(
    r"\b(?:fully\s*remote|remote\s*(?:anywhere|worldwide|global)|work\s*from\s*anywhere)\b",
    r"\bglobal(?:ly)?\s*(?:remote|distributed)\b",
    r"\bremote\s*\(?\s*(?:eu|europe|emea|worldwide|global|anywhere)\b",
    r"\b(?:worldwide|international|global)\s*(?:team|company|remote)\b",
)

US_ONLY_PATTERNS = _compile(
    r"\bu\.?s\.?\s*citizenship\s*required\b",
    r"\busa?\s*citizenship\s*required\b",
    r"\bmust\s*be\s*(?:a\s*)?u\.?s\.?\s*citizen\b",
    r"\bsecurity\s*clearance\s*required\b",
    r"\bremote\s*\(\s*us\s*\)",
    r"\bhybrid\s*\(\s*us\s*\)",
    r"\bhybrid\s*\(?\s*usa?\s*\)?",
    r"\bonsite\s*\(?\s*usa?\s*\)?",
    r"\bin[- ]?person\s*(?:in\s*)?(?:sf|nyc|la|austin|seattle|boston|chicago|denver)",
    r"\bu\.?s\.?\s*(?:only|based)\b",
)

# ---------------------------------------------------------------------------
# US-centric signals
# ---------------------------------------------------------------------------

US_CENTRIC_CITIES: tuple[str, ...] = (
    "san francisco", "sf", "new york", "nyc", "los angeles", "la", "austin",
    "seattle", "boston", "chicago", "denver", "miami", "atlanta", "dallas",
    "houston", "phoenix", "san diego", "san jose", "portland", "philadelphia",
    "washington dc", "dc", "boulder", "new jersey",
    "toronto",  # usually listed alongside US hubs
)
_US_CENTRIC_CITY_PATTERNS = tuple(
    re.compile(rf"\b{re.escape(c)}\b", _I) for c in US_CENTRIC_CITIES
)
_EU_MENTION = re.compile(r"\b(?:eu|europe|emea|european)\b", _I)
_US_TIMEZONE = re.compile(r"\b(?:us|usa|america(?:n)?)\s*(?:timezone|time\s*zone|hours)s?\b", _I)
USD_SALARY_PATTERNS = _compile(
    r"\$\d{2,3}k",
    r"\$\d{3},?\d{3}",
    r"\d{2,3}k\s*-\s*\d{2,3}k\s*usd",
    r"usd\s*\$?\d",
    r"\$\d.*usd",
)
INTERNATIONAL_PATTERNS = _compile(
    r"\b(?:worldwide|global|international|anywhere|eu|europe|emea)\b",
    r"\bremote\s*\(?\s*(?:eu|europe|emea|worldwide|global)\b",
    r"\boutside\s*(?:the\s*)?(?:us|usa|united states)\b",
)

# ---------------------------------------------------------------------------
# On-site cities
# ---------------------------------------------------------------------------

EU_CITIES: tuple[str, ...] = (
    "london", "berlin", "paris", "amsterdam", "dublin", "munich", "münchen",
    "barcelona", "madrid", "lisbon", "lisboa", "vienna", "wien", "stockholm",
    "copenhagen", "helsinki", "oslo", "zurich", "zürich", "geneva", "genève",
    "milan", "milano", "rome", "roma", "brussels", "bruxelles", "prague",
    "praha", "warsaw", "warszawa", "budapest", "bucharest", "athens",
    "edinburgh", "manchester", "birmingham",
)

US_CITIES: tuple[str, ...] = (
    "san francisco", "sf", "new york", "nyc", "los angeles", "la", "austin",
    "seattle", "boston", "chicago", "denver", "miami", "atlanta", "dallas",
    "houston", "phoenix", "san diego", "san jose", "portland", "philadelphia",
    "washington dc", "dc", "boulder", "palo alto", "mountain view",
    "menlo park", "cupertino", "sunnyvale", "redwood city", "oakland", "berkeley",
)

CITY_REGIONS: dict[str, str] = {
    **{c: "EU" for c in EU_CITIES},
    **{c: "Americas" for c in US_CITIES},
}
_CITY_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (c, re.compile(rf"\b{re.escape(c)}\b", _I)) for c in (*EU_CITIES, *US_CITIES)
)

_ROLE_PATTERN = re.compile(
    r"(?:engineer|developer|designer|manager|lead|analyst|architect|scientist|director"
    r"|vp|head of|product|marketing|sales|ops|operations|devrel|sre|devops|co-?op)\b",
    _I,
)
_SEGMENT_US_CITY = re.compile(
    r"\b(?:sf|san francisco|nyc|new york|austin|seattle|boston|chicago|denver|miami"
    r"|atlanta|los angeles|la|toronto)\b",
    _I,
)
_SEGMENT_SPLIT = re.compile(r"[\n|]")


def city_region(city: str) -> str | None:
    return CITY_REGIONS.get(city.lower())


def is_remote_job(text: str) -> bool:
    return _any(REMOTE_PATTERNS, text)


def is_explicitly_us_only(text: str) -> bool:
    """Citizenship, clearance or US-only phrasing."""
    return _any(US_ONLY_PATTERNS, text)


def appears_us_centric(text: str) -> bool:
    """True for 3+ US cities without an EU mention, US-timezone phrasing, or a
    USD salary with no international qualifier."""
    city_count = sum(1 for p in _US_CENTRIC_CITY_PATTERNS if p.search(text))
    if city_count >= 3 and not _EU_MENTION.search(text):
        return True

    if _US_TIMEZONE.search(text):
        return True

    if not _any(USD_SALARY_PATTERNS, text):
        return False
    return not _any(INTERNATIONAL_PATTERNS, text)


def is_remote_job_available_in_region(text: str, region: str) -> bool:
    """Whether a remote posting is open to *region*; benefit of the doubt when silent."""
    for pattern, allowed in REGION_RESTRICTIONS:
        if pattern.search(text):
            return region in allowed

    if appears_us_centric(text):
        return region == "Americas"

    return True


def has_explicit_global_availability(text: str) -> bool:
    return _any(GLOBAL_AVAILABILITY_PATTERNS, text)


def analyze_location_priority(text: str) -> dict[str, list[str]]:
    """Split regional intent into primary, secondary and excluded regions."""
    primary: list[str] = []
    secondary: list[str] = []
    excluded: list[str] = []

    if _any(EU_PRIMARY_PATTERNS, text):
        primary.append("EU")

    if _any(US_PRIMARY_PATTERNS, text):
        primary.append("Americas")

    if "EU" not in primary and _any(EU_SECONDARY_PATTERNS, text):
        secondary.append("EU")
        if "Americas" not in primary:
            primary.append("Americas")

    for pattern, region in EXCLUSION_RULES:
        if pattern.search(text) and region not in excluded:
            excluded.append(region)

    return {
        "primary_regions": primary,
        "secondary_regions": secondary,
        "excluded_regions": excluded,
    }


def detect_multi_role_post(text: str) -> RoleBreakdown | None:
    """Role breakdown when a post lists 2+ roles spanning 2+ location types."""
    role_count = remote = on_site = hybrid = 0

    for segment in _SEGMENT_SPLIT.split(text):
        segment = segment.strip()
        if len(segment) < 5 or not _ROLE_PATTERN.search(segment):
            continue
        role_count += 1

        if _any(ON_SITE_PATTERNS, segment):
            on_site += 1
        elif _SEGMENT_US_CITY.search(segment) and not _REMOTE_WORD.search(segment):
            on_site += 1
        elif _any(HYBRID_PATTERNS, segment):
            hybrid += 1
        elif _SEGMENT_REMOTE.search(segment) or _any(REMOTE_GLOBAL_PATTERNS, segment):
            remote += 1

    location_types = sum(1 for n in (remote, on_site, hybrid) if n > 0)
    if role_count < 2 or location_types < 2:
        return None
    return RoleBreakdown(remote_roles=remote, on_site_roles=on_site, hybrid_roles=hybrid)


def extract_on_site_locations(text: str) -> list[str]:
    locations: list[str] = []
    for city, pattern in _CITY_PATTERNS:
        if pattern.search(text):
            label = city[0].upper() + city[1:]
            if label not in locations:
                locations.append(label)
    return locations


def _regional(type_: str, text: str, on_site: list[str], confidence: str, **extra) -> ParsedLocationData:
    analysis = analyze_location_priority(text)
    return ParsedLocationData(
        type=type_,
        primary_regions=tuple(analysis["primary_regions"]),
        secondary_regions=tuple(analysis["secondary_regions"]),
        on_site_locations=tuple(on_site),
        excluded_regions=tuple(analysis["excluded_regions"]),
        confidence=confidence,
        **extra,
    )


def classify_job_location(text: str) -> ParsedLocationData:
    """Classify a posting's location type and regional intent."""
    on_site_locations = extract_on_site_locations(text)

    breakdown = detect_multi_role_post(text)
    if breakdown is not None:
        return _regional("MIXED_ROLES", text, on_site_locations, "medium", role_breakdown=breakdown)

    has_remote_mention = bool(_REMOTE_WORD.search(text))
    has_remote_global = _any(REMOTE_GLOBAL_PATTERNS, text)

    # Hybrid before on-site: hybrid phrasing usually also names an office.
    if _any(HYBRID_PATTERNS, text) and not has_remote_global:
        return _regional("HYBRID", text, on_site_locations, "medium")

    if _any(ON_SITE_PATTERNS, text) and not has_remote_global:
        return _regional("ON_SITE", text, on_site_locations, "high")

    if has_remote_global:
        analysis = analyze_location_priority(text)
        if not analysis["primary_regions"] and not appears_us_centric(text):
            return ParsedLocationData(
                type="REMOTE_GLOBAL",
                excluded_regions=tuple(analysis["excluded_regions"]),
                confidence="high",
            )

    if has_remote_mention:
        analysis = analyze_location_priority(text)
        us_centric = appears_us_centric(text)
        primary = analysis["primary_regions"]
        if primary or analysis["excluded_regions"] or us_centric:
            if not primary and us_centric:
                primary = ["Americas"]
            return ParsedLocationData(
                type="REMOTE_REGIONAL",
                primary_regions=tuple(primary),
                secondary_regions=tuple(analysis["secondary_regions"]),
                excluded_regions=tuple(analysis["excluded_regions"]),
                confidence="high" if primary else "medium",
            )
        return ParsedLocationData(type="REMOTE_GLOBAL", confidence="medium")

    if on_site_locations:
        return ParsedLocationData(
            type="ON_SITE",
            on_site_locations=tuple(on_site_locations),
            confidence="medium",
        )

    return ParsedLocationData(type="UNKNOWN", confidence="low")


# ---------------------------------------------------------------------------
# Filter predicates
# ---------------------------------------------------------------------------

def _has_on_site_in_region(locations: tuple[str, ...], region: str) -> bool:
    return any(city_region(loc) == region for loc in locations)


def matches_remote_global_filter(data: ParsedLocationData) -> bool:
    return data.type == "REMOTE_GLOBAL"


def matches_remote_region_filter(data: ParsedLocationData, region: str = "EU") -> bool:
    """Remote and open to *region*: global, or regional with *region* primary."""
    if region in data.excluded_regions:
        return False
    if data.type == "REMOTE_GLOBAL":
        return True
    if data.type == "REMOTE_REGIONAL":
        if region in data.secondary_regions and region not in data.primary_regions:
            return False
        return region in data.primary_regions or not data.primary_regions
    return False


def matches_on_site_region_filter(data: ParsedLocationData, region: str = "EU") -> bool:
    if data.type not in ("ON_SITE", "HYBRID"):
        return False
    return _has_on_site_in_region(data.on_site_locations, region)


def matches_any_region_filter(data: ParsedLocationData, region: str = "EU") -> bool:
    if matches_remote_global_filter(data):
        return True
    if matches_remote_region_filter(data, region):
        return True
    if matches_on_site_region_filter(data, region):
        return True

    if data.type != "MIXED_ROLES":
        return False
    if region in data.excluded_regions:
        return False
    if region in data.primary_regions:
        return True
    if _has_on_site_in_region(data.on_site_locations, region):
        return True
    if data.on_site_locations:
        return False
    # no offices and no regional focus: benefit of the doubt
    return not data.primary_regions


# EU-named aliases for the default region
def matches_remote_eu_filter(data: ParsedLocationData, region: str = "EU") -> bool:
    return matches_remote_region_filter(data, region)


def matches_on_site_eu_filter(data: ParsedLocationData) -> bool:
    return matches_on_site_region_filter(data, "EU")


def matches_any_eu_filter(data: ParsedLocationData, region: str = "EU") -> bool:
    return matches_any_region_filter(data, region)


def matches_location_filter(data: ParsedLocationData, location_filter: str, region: str = "EU") -> bool:
    if location_filter == "remote-global":
        return matches_remote_global_filter(data)
    if location_filter == "remote-region":
        return matches_remote_region_filter(data, region)
    if location_filter == "onsite-region":
        return matches_on_site_region_filter(data, region)
    if location_filter == "any-region":
        return matches_any_region_filter(data, region)
    return True
