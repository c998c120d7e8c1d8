"""Tests for cura.core.utils."""

from datetime import date, datetime, timezone

from cura.core.utils import is_blank, parse_fhir_date, parse_fhir_datetime, strip_tags


class TestParseFhirDatetime:
    def test_date_only_is_midnight_utc(self):
        assert parse_fhir_datetime("2025-08-01") == datetime(2025, 8, 1, tzinfo=timezone.utc)

    def test_zulu_timestamp(self):
        assert parse_fhir_datetime("2025-08-15T09:30:00Z") == datetime(
            2025, 8, 15, 9, 30, tzinfo=timezone.utc
        )

    def test_offset_converted_to_utc(self):
        assert parse_fhir_datetime("2025-08-15T09:30:00-05:00") == datetime(
            2025, 8, 15, 14, 30, tzinfo=timezone.utc
        )

    def test_year_month(self):
        assert parse_fhir_datetime("2024-03") == datetime(2024, 3, 1, tzinfo=timezone.utc)

    def test_year_only(self):
        assert parse_fhir_datetime("2024") == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_us_format(self):
        assert parse_fhir_datetime("06/30/2025") == datetime(2025, 6, 30, tzinfo=timezone.utc)

    def test_unparseable(self):
        assert parse_fhir_datetime("last tuesday") is None

    def test_invalid_calendar_date(self):
        assert parse_fhir_datetime("2025-13-45") is None

    def test_empty_and_none(self):
        assert parse_fhir_datetime("") is None
        assert parse_fhir_datetime(None) is None

    def test_out_of_range_after_utc_conversion(self):
        assert parse_fhir_datetime("9999-12-31T23:00:00-05:00") is None
        assert parse_fhir_datetime("0001-01-01T00:30:00+01:00") is None

    def test_range_edge_without_offset(self):
        assert parse_fhir_datetime("9999-12-31T23:00:00") == datetime(
            9999, 12, 31, 23, tzinfo=timezone.utc
        )

    def test_result_is_always_aware(self):
        assert parse_fhir_datetime("2025-08-01T10:00:00").tzinfo is not None


class TestParseFhirDate:
    def test_plain_date(self):
        assert parse_fhir_date("1975-06-15") == date(1975, 6, 15)

    def test_offset_not_applied(self):
        assert parse_fhir_date("1975-06-15T23:00:00-05:00") == date(1975, 6, 15)

    def test_garbage(self):
        assert parse_fhir_date("not a date") is None


class TestStripTags:
    def test_simple_div(self):
        assert strip_tags("<div>Hello</div>") == "Hello"

    def test_nested_markup(self):
        html = '<div xmlns="http://www.w3.org/1999/xhtml"><p>Chest <b>pain</b></p></div>'
        assert strip_tags(html) == "Chest  pain"

    def test_malformed_markup_tolerated(self):
        assert strip_tags("<div>a < b and <unclosed") == "a < b and <unclosed"

    def test_multiline_tag(self):
        assert strip_tags('<div\n class="x">text</div>') == "text"

    def test_empty(self):
        assert strip_tags("") == ""
        assert strip_tags("<div></div>") == ""


class TestIsBlank:
    def test_values(self):
        assert is_blank(None)
        assert is_blank("   ")
        assert is_blank(5)
        assert not is_blank("x")
