"""
Test suite for crawler Pydantic schemas.

Selector configuration defaulting and aliasing, run-time settings bounds,
and the contact record's output column order.
"""

import pytest
from pydantic import ValidationError

from dircrawl.schemas import CSV_HEADERS, DEFAULT_BASE_URL, ContactRecord, CrawlSettings, SelectorConfig, Selectors


class TestSelectorConfig:
    """Test cases for the selector configuration document."""

    def test_defaults_are_non_empty(self):
        """Every locator has a usable default."""
        config = SelectorConfig()
        assert config.base_url == DEFAULT_BASE_URL
        for value in config.selectors.model_dump().values():
            assert value.strip()

    def test_camel_case_document_is_accepted(self):
        """On-disk names map onto snake_case fields."""
        config = SelectorConfig.model_validate({
            "baseUrl": "https://members.example.org/find",
            "selectors": {"contactRow": "div.member", "nameLink": "a.name", "cityStateZip": "td:nth-child(5)", "nextPage": "a.next"},
        })
        assert config.base_url == "https://members.example.org/find"
        assert config.selectors.contact_row == "div.member"
        assert config.selectors.name_link == "a.name"
        assert config.selectors.city_state_zip == "td:nth-child(5)"
        assert config.selectors.next_page == "a.next"
        # Unspecified locators keep their defaults
        assert config.selectors.phone == Selectors().phone

    def test_blank_values_fall_back_to_defaults(self):
        """Blank strings in a partial config do not erase defaults."""
        config = SelectorConfig.model_validate({"baseUrl": "", "selectors": {"email": "  ", "phone": None}})
        assert config.base_url == DEFAULT_BASE_URL
        assert config.selectors.email == Selectors().email
        assert config.selectors.phone == Selectors().phone

    def test_invalid_url_raises_error(self):
        """Non-HTTP base URLs are rejected."""
        with pytest.raises(ValueError, match="baseUrl must be a valid HTTP/HTTPS URL"):
            SelectorConfig(base_url="ftp://example.com")

    def test_config_is_immutable(self):
        config = SelectorConfig()
        with pytest.raises(ValidationError):
            config.selectors.contact_row = "tr"

    def test_document_round_trip_uses_aliases(self):
        doc = SelectorConfig().to_document()
        assert set(doc) == {"baseUrl", "selectors"}
        assert set(doc["selectors"]) == {"contactRow", "nameLink", "address", "cityStateZip", "phone", "email", "nextPage"}
        assert SelectorConfig.model_validate(doc) == SelectorConfig()


class TestCrawlSettings:
    """Test cases for run-time knobs."""

    def test_defaults(self):
        s = CrawlSettings()
        assert s.base_url is None
        assert s.headless is False
        assert (s.slow_mo_ms, s.timeout_ms, s.max_pages) == (100, 30000, 30)
        assert (s.delay_between_contacts_ms, s.delay_between_pages_ms) == (500, 1000)
        assert s.login_timeout_ms == 300000
        assert s.checkpoint_every == 10
        assert s.output == "contacts_export.csv"

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            CrawlSettings.model_validate({"max_page": 3})

    def test_max_pages_must_be_positive(self):
        with pytest.raises(ValidationError):
            CrawlSettings(max_pages=0)


class TestContactRecord:
    """Test cases for the output record."""

    def test_all_fields_default_empty(self):
        assert ContactRecord().to_row() == [""] * len(CSV_HEADERS)

    def test_row_order_matches_headers(self):
        rec = ContactRecord(
            first_name="Jane", middle_initial="Q", last_name="Public",
            address1="1 Main St", address2="Apt 2", city="Springfield",
            state="IL", zip="62704", phone="555-1234", email="jane@x.org",
        )
        assert dict(zip(CSV_HEADERS, rec.to_row())) == {
            "First Name": "Jane",
            "Middle Initial": "Q",
            "Last Name": "Public",
            "Address1": "1 Main St",
            "Address2": "Apt 2",
            "City": "Springfield",
            "State": "IL",
            "Zip": "62704",
            "Phone": "555-1234",
            "Email": "jane@x.org",
        }

    def test_email_assignment_is_validated(self):
        rec = ContactRecord()
        rec.email = "pat@site.org"
        assert rec.to_row()[-1] == "pat@site.org"
        with pytest.raises(ValidationError):
            rec.email = None
