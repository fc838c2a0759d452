from __future__ import annotations

import re
import sys
from typing import Optional

from selectolax.lexbor import LexborHTMLParser, SelectolaxError

from .extractors import visible_text


# Playwright selectors, tried as one union (document order decides)
NEXT_PAGE_HEURISTICS = (
    'a:has-text("Next"), a:has-text("›"), a:has-text("»"), a:has-text(">>"), '
    'a[rel="next"], a[title*="Next"], a[aria-label*="Next"], '
    '.pagination a.next, .pager a.next, '
    'input[value="Next"], button:has-text("Next"), '
    'a[href*="page"]:has-text(">"), .next-page'
)

ACTIVE_PAGE_SELECTORS = '.pagination .active, .pager .current, [aria-current="page"], .page-item.active'
PAGE_X_OF_Y_RE = re.compile(r"page\s+(\d+)\s+of\s+(\d+)", re.IGNORECASE)


def is_disabled(element) -> bool:
    """True when a control is marked disabled by class, attribute or ARIA."""
    classes = (element.get_attribute("class") or "").split()
    if "disabled" in classes:
        return True
    if element.get_attribute("disabled") is not None:
        return True
    return (element.get_attribute("aria-disabled") or "").strip().lower() == "true"


def current_page_number(html: str) -> int:
    """Page number reported by the results page itself; 1 when unknown."""
    parser = LexborHTMLParser(html or "")
    try:
        active = parser.css_first(ACTIVE_PAGE_SELECTORS)
    except SelectolaxError:
        active = None
    if active is not None:
        txt = visible_text(active).strip()
        if txt.isdigit():
            return int(txt)
    m = PAGE_X_OF_Y_RE.search(visible_text(parser.body or parser.root))
    if m:
        return int(m.group(1))
    return 1


class Paginator:
    """Finds and activates the next-page control of a results listing.

    Failures here are never fatal: any exception means "no next page" and
    the crawl ends with what it has collected.
    """

    def __init__(
        self,
        *,
        next_selector: Optional[str] = None,
        delay_ms: int = 1000,
        timeout_ms: int = 30000,
    ) -> None:
        self.next_selector = next_selector
        self.delay_ms = delay_ms
        self.timeout_ms = timeout_ms

    def candidates(self) -> list[str]:
        out = []
        if self.next_selector:
            out.append(self.next_selector)
        out.append(NEXT_PAGE_HEURISTICS)
        return out

    def find_next_control(self, page):
        """Return the first element matching a next-page locator, or None."""
        for selector in self.candidates():
            handle = page.query_selector(selector)
            if handle is not None:
                return handle
        return None

    def go_next(self, page) -> bool:
        try:
            control = self.find_next_control(page)
            if control is None:
                return False
            if is_disabled(control):
                return False
            control.click()
            page.wait_for_timeout(self.delay_ms)
            page.wait_for_load_state("domcontentloaded", timeout=self.timeout_ms)
            return True
        except Exception as e:
            print(f"   ⚠️  Error navigating to next page: {e}", file=sys.stderr)
            return False
