import pytest

from jobboard.location import (
    analyze_location_priority,
    appears_us_centric,
    classify_job_location,
    detect_multi_role_post,
    get_region_from_country,
    get_region_label,
    is_explicitly_us_only,
    is_remote_job,
    is_remote_job_available_in_region,
    matches_any_eu_filter,
    matches_any_region_filter,
    matches_location_filter,
    matches_on_site_eu_filter,
    matches_remote_eu_filter,
    matches_remote_global_filter,
    matches_remote_region_filter,
)

TRUNK_ROLES = (
    "Marketing Lead (Developers) - Remote friendly | Forward Deployed Engineer- Software Engineer II"
    " | DevRel Engineer - San Francisco| Staff Full Stack Engineer - San Francisco"
    " | Sr Full Stack Engineer - San Francisco"
)


# --- Regions ---

def test_country_to_region():
    assert get_region_from_country("IT") == "EU"
    assert get_region_from_country("gb") == "EU"
    assert get_region_from_country("BR") == "Americas"
    assert get_region_from_country("JP") == "APAC"
    assert get_region_from_country("AE") == "MENA"
    assert get_region_from_country("ZZ") == "Global"
    assert get_region_label("APAC") == "Asia-Pacific"


# --- analyze_location_priority ---

@pytest.mark.parametrize("text", [
    "Remote (EU)",
    "Remote - EU only",
    "Europe-based remote position",
    "EU timezone preferred",
])
def test_eu_primary(text):
    result = analyze_location_priority(text)
    assert "EU" in result["primary_regions"]
    assert "EU" not in result["secondary_regions"]


@pytest.mark.parametrize("text", [
    "Remote (US)",
    "US REMOTE | Full-time",
    "US timezones only",
    "Remote (North America, GMT-8–GMT-5)",
])
def test_us_primary(text):
    assert "Americas" in analyze_location_priority(text)["primary_regions"]


@pytest.mark.parametrize("text", ["Remote (US/Canada/Europe)", "US or Europe"])
def test_eu_secondary(text):
    result = analyze_location_priority(text)
    assert result["secondary_regions"] == ["EU"]
    assert "EU" not in result["primary_regions"]
    assert "Americas" in result["primary_regions"]


def test_exclusions():
    assert analyze_location_priority("No US citizens")["excluded_regions"] == ["Americas"]
    assert analyze_location_priority("Remote worldwide, excluding EU")["excluded_regions"] == ["EU"]


# --- detect_multi_role_post ---

def test_single_role_is_not_multi_role():
    assert detect_multi_role_post("Senior Engineer | Remote | Full-time") is None


def test_roles_sharing_a_location_type_are_not_multi_role():
    assert detect_multi_role_post("Senior Engineer - Remote\nJunior Engineer - Remote") is None


def test_mixed_remote_and_on_site_roles():
    breakdown = detect_multi_role_post(
        "Marketing Lead - Remote friendly | DevRel Engineer - San Francisco | Staff Engineer - San Francisco"
    )
    assert breakdown is not None
    assert breakdown.remote_roles == 1
    assert breakdown.on_site_roles == 2


def test_pipe_separated_roles():
    assert detect_multi_role_post("Senior Developer - NYC | Designer - Remote | Manager - SF") is not None


def test_hybrid_and_remote_roles_count_as_mixed():
    breakdown = detect_multi_role_post("Backend Engineer - Remote\nProduct Designer - Hybrid, London")
    assert breakdown is not None
    assert breakdown.remote_roles == 1
    assert breakdown.hybrid_roles == 1


# --- appears_us_centric ---

@pytest.mark.parametrize("text, expected", [
    ("REMOTE or San Francisco, Los Angeles, Chicago, Boston", True),
    ("San Francisco, Los Angeles, Chicago, or Europe", False),
    ("Remote | US timezones", True),
    ("$150k - $200k | Remote", True),
    ("$150k - $200k | Remote worldwide", False),
    ("Remote | Full-time | Berlin", False),
])
def test_appears_us_centric(text, expected):
    assert appears_us_centric(text) is expected


def test_city_abbreviations_need_whole_words():
    # "la" and "dc" inside other words are not cities
    assert appears_us_centric("Remote | Scala, Flask, Django | Boston") is False


# --- Remote and regional availability ---

def test_is_remote_job():
    assert is_remote_job("Fully remote team")
    assert is_remote_job("WFH possible")
    assert is_remote_job("Work from anywhere")
    assert not is_remote_job("Office in Berlin, 5 days a week")


def test_region_restrictions():
    assert is_remote_job_available_in_region("Remote (US only)", "EU") is False
    assert is_remote_job_available_in_region("Remote (US only)", "Americas") is True
    assert is_remote_job_available_in_region("Remote (EU)", "Americas") is False
    assert is_remote_job_available_in_region("Remote, work from anywhere", "APAC") is True


def test_region_benefit_of_the_doubt():
    assert is_remote_job_available_in_region("Remote position, great team", "EU") is True


def test_us_centric_remote_is_americas_only():
    text = "Remote | $180k base"
    assert is_remote_job_available_in_region(text, "EU") is False
    assert is_remote_job_available_in_region(text, "Americas") is True


def test_explicitly_us_only():
    assert is_explicitly_us_only("US citizenship required")
    assert is_explicitly_us_only("Security clearance required")
    assert not is_explicitly_us_only("Remote (EU)")


# --- classify_job_location ---

@pytest.mark.parametrize("text", [
    "Fully remote, work from anywhere",
    "100% remote, distributed team",
    "Remote-first, async company",
    "Remote worldwide | Senior Engineer",
])
def test_remote_global(text):
    result = classify_job_location(text)
    assert result.type == "REMOTE_GLOBAL"
    assert result.confidence == "high"


def test_plain_remote_without_region_is_global_medium():
    result = classify_job_location("Remote | Full-time")
    assert result.type == "REMOTE_GLOBAL"
    assert result.confidence == "medium"


@pytest.mark.parametrize("text", [
    "Remote (US, Canada)",
    "US REMOTE | Full-time",
    "Remote (North America, GMT-8–GMT-5) | Full-time",
    "Full time (US timezones) | Remote",
])
def test_remote_regional_americas(text):
    result = classify_job_location(text)
    assert result.type == "REMOTE_REGIONAL"
    assert "Americas" in result.primary_regions
    assert "EU" not in result.primary_regions


def test_remote_regional_eu_secondary():
    result = classify_job_location("Remote (US/Canada/Europe)")
    assert result.type == "REMOTE_REGIONAL"
    assert "EU" in result.secondary_regions
    assert "EU" not in result.primary_regions


def test_remote_regional_eu_primary():
    result = classify_job_location("Remote (EU) | Senior Engineer")
    assert result.type == "REMOTE_REGIONAL"
    assert result.primary_regions == ("EU",)


def test_primary_and_secondary_never_overlap():
    for text in ("Remote (US/Canada/Europe)", "Remote (EU) or US", "US or Europe, remote"):
        result = classify_job_location(text)
        assert not set(result.primary_regions) & set(result.secondary_regions)


def test_mixed_roles():
    result = classify_job_location(TRUNK_ROLES)
    assert result.type == "MIXED_ROLES"
    assert result.role_breakdown is not None
    assert "San francisco" in result.on_site_locations


def test_on_site():
    result = classify_job_location("ONSITE in Zurich (Switzerland)")
    assert result.type == "ON_SITE"
    assert result.confidence == "high"
    assert "Zurich" in result.on_site_locations

    assert classify_job_location("In-person, SF office").type == "ON_SITE"


def test_city_only_is_on_site():
    result = classify_job_location("Berlin | Full-time | Senior Engineer")
    assert result.type == "ON_SITE"
    assert result.on_site_locations == ("Berlin",)


@pytest.mark.parametrize("text", [
    "Boston, MA / SF Hybrid or Remote | US timezones",
    "Hybrid - 2 days in office | London",
])
def test_hybrid(text):
    assert classify_job_location(text).type == "HYBRID"


def test_unknown():
    result = classify_job_location("Great culture and free snacks")
    assert result.type == "UNKNOWN"
    assert result.confidence == "low"


# --- Real-world posts ---

FUSIONBOX = (
    "Fusionbox | Python + TypeScript Engineers | United States| Full-time"
    " | REMOTE (Legal to work in the US)"
)
TRUNK = "Trunk | https://trunk.io\n" + TRUNK_ROLES


@pytest.mark.parametrize("text, expected_type", [
    (TRUNK_ROLES, "MIXED_ROLES"),
    ("Nova Credit | Remote (US, Canada) | Full-time", "REMOTE_REGIONAL"),
    (
        "RINSE | REMOTE or San Francisco, Los Angeles, Chicago, Boston, New York, New Jersey,"
        " Seattle, Austin, Dallas, Toronto, or Washington DC",
        "REMOTE_REGIONAL",
    ),
    ("AllSpice | Boston, MA / SF Hybrid or Remote | Full time (US timezones)", "HYBRID"),
    ("Ezra | Principal Engineer (Full-Stack) | US REMOTE | Full-time", "REMOTE_REGIONAL"),
    ("Pinetree | Remote (North America, GMT-8–GMT-5) | Full-time", "REMOTE_REGIONAL"),
    (FUSIONBOX, "REMOTE_REGIONAL"),
])
def test_us_focused_posts_are_not_eu_remote(text, expected_type):
    result = classify_job_location(text)
    assert result.type == expected_type
    assert matches_remote_global_filter(result) is False
    assert matches_remote_eu_filter(result) is False


def test_fusionbox_is_americas_primary():
    assert "Americas" in classify_job_location(FUSIONBOX).primary_regions


def test_trunk_does_not_match_any_eu():
    result = classify_job_location(TRUNK)
    assert result.type == "MIXED_ROLES"
    assert matches_any_eu_filter(result) is False


# --- Filter predicates ---

@pytest.mark.parametrize("text, expected", [
    ("Fully remote, work from anywhere", True),
    ("Remote (US, Canada)", False),
    ("ONSITE in Berlin", False),
    ("Hybrid | London", False),
    ("Engineer - Remote | Designer - SF", False),
])
def test_remote_global_filter(text, expected):
    assert matches_remote_global_filter(classify_job_location(text)) is expected


@pytest.mark.parametrize("text, expected", [
    ("Fully remote, work from anywhere", True),
    ("Remote (EU) | Senior Engineer", True),
    ("Remote (US/Canada/Europe)", False),
    ("Remote (US, Canada)", False),
    ("Hybrid | New York", False),
    ("On-site | San Francisco", False),
    ("Marketing Lead - Remote | Engineer - SF", False),
])
def test_remote_eu_filter(text, expected):
    assert matches_remote_eu_filter(classify_job_location(text)) is expected


def test_remote_region_filter_for_americas():
    data = classify_job_location("Remote (US, Canada)")
    assert matches_remote_region_filter(data, "Americas") is True
    assert matches_remote_region_filter(data, "APAC") is False


@pytest.mark.parametrize("text, expected", [
    ("ONSITE in Zurich", True),
    ("Hybrid | London", True),
    ("On-site | San Francisco", False),
    ("Fully remote worldwide", False),
    ("Remote (EU)", False),
])
def test_on_site_eu_filter(text, expected):
    assert matches_on_site_eu_filter(classify_job_location(text)) is expected


@pytest.mark.parametrize("text, expected", [
    ("Fully remote, work from anywhere", True),
    ("Remote (EU)", True),
    ("ONSITE Berlin", True),
    ("Hybrid | Amsterdam", True),
    ("Remote (US, Canada)", False),
    ("On-site San Francisco", False),
])
def test_any_eu_filter(text, expected):
    assert matches_any_eu_filter(classify_job_location(text)) is expected


def test_any_region_filter_for_americas_on_site():
    data = classify_job_location("On-site San Francisco")
    assert matches_any_region_filter(data, "Americas") is True


def test_mixed_roles_with_eu_office_matches_any_eu():
    data = classify_job_location("Backend Engineer - Remote | Product Designer - Berlin office, on-site")
    assert data.type == "MIXED_ROLES"
    assert matches_any_eu_filter(data) is True


def test_matches_location_filter_dispatch():
    data = classify_job_location("Remote (US, Canada)")
    assert matches_location_filter(data, "all") is True
    assert matches_location_filter(data, "remote-global") is False
    assert matches_location_filter(data, "remote-region", "Americas") is True
    assert matches_location_filter(data, "onsite-region", "Americas") is False
    assert matches_location_filter(data, "any-region", "EU") is False
