import pytest

from masjid_directory.models.validation import normalize_masjid, validate_masjid, validate_user


def valid_doc(**overrides):
    doc = {
        "name": "Masjid Noor",
        "address": "12 Crescent Rd, Springfield",
        "latitude": 39.78,
        "longitude": -89.65,
        "calculationMethod": "Islamic Society of North America",
        "phone": "+1 (217) 555-0100",
        "email": "info@masjidnoor.org",
        "prayerTimes": {"fajr": "05:12", "dhuhr": "12:58", "asr": None, "maghrib": "19:15", "isha": "9:05"},
    }
    doc.update(overrides)
    return doc


def test_valid_document_has_no_errors():
    assert validate_masjid(valid_doc()) == []


def test_optional_fields_may_be_absent():
    doc = {"name": "Al-Farooq", "address": "1 Main St", "latitude": 0.5, "longitude": 0.5}
    assert validate_masjid(doc) == []


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"name": ""}, "Name is required"),
        ({"address": None}, "Address is required"),
        ({"latitude": None}, "Latitude is required"),
        ({"latitude": 90.5}, "Latitude must be between -90 and 90"),
        ({"longitude": -180.01}, "Longitude must be between -180 and 180"),
        ({"longitude": "east"}, "Longitude must be between -180 and 180"),
        ({"calculationMethod": "Made Up Method"}, "Invalid calculation method"),
        ({"phone": "0123 456"}, "Invalid phone number format"),
        ({"phone": "555-CALL-NOW"}, "Invalid phone number format"),
        ({"email": "not-an-email"}, "Invalid email format"),
        ({"prayerTimes": {"fajr": "25:00"}}, "Prayer time must be in HH:MM format"),
    ],
)
def test_violations_are_reported(overrides, message):
    assert validate_masjid(valid_doc(**overrides)) == [message]


def test_every_violation_is_reported_at_once():
    errors = validate_masjid({"latitude": 100, "prayerTimes": {"fajr": "5am", "isha": "late"}})

    assert errors == [
        "Name is required",
        "Longitude is required",
        "Latitude must be between -90 and 90",
        "Address is required",
        "Prayer time must be in HH:MM format",
        "Prayer time must be in HH:MM format",
    ]


def test_boundaries_are_inclusive():
    assert validate_masjid(valid_doc(latitude=-90, longitude=180)) == []


def test_trailing_newline_is_not_a_valid_time():
    assert validate_masjid(valid_doc(prayerTimes={"fajr": "05:12\n"})) == ["Prayer time must be in HH:MM format"]


def test_normalize_trims_and_lowercases():
    doc = normalize_masjid(
        {"name": "  Masjid Noor ", "address": " 12 Crescent Rd ", "email": " Info@MasjidNoor.ORG ", "phone": "", "calculationMethod": ""}
    )

    assert doc["name"] == "Masjid Noor"
    assert doc["address"] == "12 Crescent Rd"
    assert doc["email"] == "info@masjidnoor.org"
    assert doc["phone"] is None
    assert doc["calculationMethod"] is None


def test_normalize_leaves_input_untouched():
    original = {"name": " x "}
    normalize_masjid(original)
    assert original == {"name": " x "}


@pytest.mark.parametrize(
    "email, expected",
    [
        ("someone@example.com", []),
        ("", ["Email is required"]),
        (None, ["Email is required"]),
        ("someone@localhost", ["Invalid email address"]),
    ],
)
def test_validate_user(email, expected):
    assert validate_user({"email": email}) == expected
