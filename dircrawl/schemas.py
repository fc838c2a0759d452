"""
Directory Contact Crawler - Pydantic Data Schemas

Core data models for the selector configuration consumed by a crawl run,
the run-time settings, and the contact record written to the output table.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


DEFAULT_BASE_URL = "https://pfac-pro.site-ym.com/search/newsearch.asp"

# Output table column order
CSV_HEADERS = [
    "First Name",
    "Middle Initial",
    "Last Name",
    "Address1",
    "Address2",
    "City",
    "State",
    "Zip",
    "Phone",
    "Email",
]


def _drop_blank(data):
    """Remove None/blank string values so field defaults apply."""
    if not isinstance(data, dict):
        return data
    return {
        k: v for k, v in data.items()
        if v is not None and not (isinstance(v, str) and not v.strip())
    }


class Selectors(BaseModel):
    """
    Named set of CSS-like locators for one directory site.

    Every locator has a non-empty default so a crawl can proceed with a
    partially filled configuration file.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    contact_row: str = Field(
        default="table.searchResults tr, .search-results .result-item, .member-list .member, table tbody tr",
        alias="contactRow",
        description="Selector matching one element per contact row",
    )
    name_link: str = Field(
        default='a[href*="profile"], a[href*="member"], a[href*="contact"], a[href*="detail"], td:first-child a, td a',
        alias="nameLink",
        description="Selector (scoped to a row) for the link to the detail page",
    )
    address: str = Field(default="td:nth-child(2)", alias="address")
    city_state_zip: str = Field(default="td:nth-child(3)", alias="cityStateZip")
    phone: str = Field(default="td:nth-child(4)", alias="phone")
    email: str = Field(
        default='a[href^="mailto:"]',
        alias="email",
        description="Selector on the detail page for the mail-contact element",
    )
    next_page: str = Field(
        default='a:has-text("Next")',
        alias="nextPage",
        description="Playwright selector for the next-page control",
    )

    @model_validator(mode="before")
    @classmethod
    def fill_blank_with_defaults(cls, data):
        return _drop_blank(data)

    def column_selectors(self) -> dict[str, str]:
        """Row-scoped column locators keyed by the field they refine."""
        return {
            "address": self.address,
            "city_state_zip": self.city_state_zip,
            "phone": self.phone,
        }


class SelectorConfig(BaseModel):
    """Selector configuration document: base URL plus the selector set."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    base_url: str = Field(default=DEFAULT_BASE_URL, alias="baseUrl")
    selectors: Selectors = Field(default_factory=Selectors)

    @model_validator(mode="before")
    @classmethod
    def fill_blank_with_defaults(cls, data):
        return _drop_blank(data)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError("baseUrl must be a valid HTTP/HTTPS URL")
        return v

    def to_document(self) -> dict:
        """Serialise with the on-disk (camelCase) key names."""
        return self.model_dump(by_alias=True)


class CrawlSettings(BaseModel):
    """Run-time knobs. Each is a plain scalar override with a default."""
    model_config = ConfigDict(extra="forbid")

    base_url: Optional[str] = None  # None -> use SelectorConfig.base_url
    output: str = "contacts_export.csv"
    headless: bool = False
    slow_mo_ms: int = Field(default=100, ge=0)
    timeout_ms: int = Field(default=30000, gt=0)
    max_pages: int = Field(default=30, ge=1)
    delay_between_contacts_ms: int = Field(default=500, ge=0)
    delay_between_pages_ms: int = Field(default=1000, ge=0)
    login_timeout_ms: int = Field(default=300000, gt=0)
    checkpoint_every: int = Field(default=10, ge=1)
    viewport_width: int = 1280
    viewport_height: int = 800


class ContactRecord(BaseModel):
    """
    One output row. All fields are strings, empty when unknown.

    Built from a RawRow, then the email is filled in once by the detail
    visitor before the record is appended to the result set.
    """
    model_config = ConfigDict(validate_assignment=True)

    first_name: str = ""
    middle_initial: str = ""
    last_name: str = ""
    address1: str = ""
    address2: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    phone: str = ""
    email: str = ""

    def to_row(self) -> list[str]:
        """Values in CSV_HEADERS order."""
        return [
            self.first_name,
            self.middle_initial,
            self.last_name,
            self.address1,
            self.address2,
            self.city,
            self.state,
            self.zip,
            self.phone,
            self.email,
        ]


@dataclass(frozen=True)
class RawRow:
    """Per-row data read from a results page. Transient, never persisted."""
    index: int
    name: str
    detail_href: str | None
    row_text: str
    cell_texts: tuple[str, ...] = ()
    column_texts: dict[str, str] = field(default_factory=dict)


class CrawlPhase(str, Enum):
    """States of the crawl orchestrator."""
    IDLE = "idle"
    GATING = "gating"
    EXTRACTING_PAGE = "extracting_page"
    VISITING_DETAILS = "visiting_details"
    PAGINATING = "paginating"
    COMPLETED = "completed"
    ERROR = "error"
