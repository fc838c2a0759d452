"""
Detail page email recovery.

A contact's detail page is loaded in the shared browser page, snapshotted and
searched for an email address with three strategies, first hit wins:

(a) the configured mail-contact element (default: mailto anchors)
(b) an email-shaped substring anywhere in the visible text, preferring
    addresses that are not generic mailboxes
(c) an "Email:" label followed by an address on the same line
"""
from __future__ import annotations

import re
import sys
from typing import List, Optional

from playwright.sync_api import Error as PlaywrightError
from selectolax.lexbor import LexborHTMLParser, LexborNode, SelectolaxError

from ..schemas import Selectors
from .extractors import visible_text
from .parsers import clean_email

DEFAULT_EMAIL_SELECTOR = Selectors().email
TEXT_EMAIL_RE = re.compile(r"[\w.-]+@[\w.-]+\.\w{2,}")
LABELED_EMAIL_RE = re.compile(r"email:\s*([\w.-]+@[\w.-]+\.\w+)", re.IGNORECASE)
GENERIC_MARKERS = ("noreply", "support@", "info@", "admin@")


def _css_first(parser: LexborHTMLParser, selector: str) -> Optional[LexborNode]:
    try:
        return parser.css_first(selector)
    except SelectolaxError:
        # Locator the static parser cannot evaluate
        return None


def _strip_mailto(value: str) -> str:
    s = (value or "").strip()
    if s.lower().startswith("mailto:"):
        s = s[7:]
    return s.split("?", 1)[0]


def email_from_mail_link(parser: LexborHTMLParser, email_selector: str = DEFAULT_EMAIL_SELECTOR) -> str:
    selectors = [email_selector]
    if email_selector != DEFAULT_EMAIL_SELECTOR:
        selectors.append(DEFAULT_EMAIL_SELECTOR)
    for sel in selectors:
        node = _css_first(parser, sel)
        if node is None:
            continue
        href = node.attrs.get("href") or ""
        email = clean_email(_strip_mailto(href)) if href else ""
        if not email:
            email = clean_email(visible_text(node))
        if email:
            return email
    return ""


def email_from_text(text: str) -> str:
    matches: List[str] = TEXT_EMAIL_RE.findall(text or "")
    if not matches:
        return ""
    personal = [m for m in matches if not any(g in m.lower() for g in GENERIC_MARKERS)]
    return clean_email(personal[0] if personal else matches[0])


def email_from_label(text: str) -> str:
    for line in (text or "").splitlines():
        if "email:" not in line.lower():
            continue
        m = LABELED_EMAIL_RE.search(line)
        if m:
            return clean_email(m.group(1))
    return ""


def find_email(html: str, email_selector: str = DEFAULT_EMAIL_SELECTOR) -> str:
    """Search a detail page snapshot for an email address; '' when none."""
    parser = LexborHTMLParser(html or "")
    email = email_from_mail_link(parser, email_selector)
    if email:
        return email
    text = visible_text(parser.body or parser.root)
    return email_from_text(text) or email_from_label(text)


class DetailVisitor:
    """Navigates to a detail page and recovers the contact's email.

    Navigation and parse failures are per-item: a warning is printed and '' returned.
    The caller is responsible for returning to the results page afterwards.
    """

    def __init__(
        self,
        *,
        email_selector: str = DEFAULT_EMAIL_SELECTOR,
        timeout_ms: int = 30000,
        settle_ms: int = 500,
    ) -> None:
        self.email_selector = email_selector
        self.timeout_ms = timeout_ms
        self.settle_ms = settle_ms
        self.failures = 0

    def visit(self, page, url: str) -> str:
        try:
            page.goto(url, wait_until="domcontentloaded", timeout=self.timeout_ms)
            page.wait_for_timeout(self.settle_ms)
            html = page.content()
        except PlaywrightError as e:
            self.failures += 1
            print(f"   ⚠️  Could not get email from {url}: {e}", file=sys.stderr)
            return ""
        try:
            return find_email(html, self.email_selector)
        except (SelectolaxError, RecursionError) as e:
            self.failures += 1
            print(f"   ⚠️  Could not parse detail page {url}: {e!r}", file=sys.stderr)
            return ""
