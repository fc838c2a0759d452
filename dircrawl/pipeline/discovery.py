"""
Interactive selector discovery for a directory site.

Walks an operator through the locators a crawl needs (rows, name link,
address / city-state-zip / phone columns, detail-page email, next-page
control). For each one it tests built-in candidates against the live page,
reports match counts, highlights the chosen elements and lets the operator
accept or override. The row/email/next-page previews use the same
extraction primitives as the unattended crawler.

Row/name/column selectors must be plain CSS because the crawler evaluates
them on a page snapshot; anything else is re-prompted. Beyond that,
correctness is operator-judged.
"""
from __future__ import annotations

import re
from typing import Callable, List, Optional, Tuple

from playwright.sync_api import Error as PlaywrightError
from selectolax.lexbor import SelectolaxError

from ..schemas import SelectorConfig, Selectors
from .detail import find_email
from .extractors import build_contact_record, extract_rows, is_static_selector
from .pagination import Paginator, is_disabled


ROW_CANDIDATES = [
    "table tbody tr",
    "table.searchResults tr",
    ".search-results tr",
    ".member-list tr",
    ".directory-listing tr",
    'table tr[class*="row"]',
]

NAME_CANDIDATES = [
    "td:first-child a",
    'td a[href*="profile"]',
    'td a[href*="member"]',
    "a.member-name",
    "td:nth-child(1) a",
    'a[href*="contact"]',
]

EMAIL_CANDIDATES = [
    'a[href^="mailto:"]',
    "span.email",
    ".member-email",
    '[class*="email"]',
]

NEXT_CANDIDATES = [
    'a:has-text("Next")',
    'a:has-text("›")',
    'a[title*="Next"]',
    ".pagination a.next",
    'input[value="Next"]',
    'a[rel="next"]',
]

HIGHLIGHT_JS = """(els) => {
  document.querySelectorAll('.dcc-highlight').forEach(el => {
    el.classList.remove('dcc-highlight');
    el.style.outline = '';
  });
  els.forEach(el => {
    el.classList.add('dcc-highlight');
    el.style.outline = '3px solid red';
  });
  return els.length;
}"""

RULE = "─" * 64


def column_selector(answer: str, default: str) -> str:
    """A 1-based column number becomes td:nth-child(N); anything else is a selector."""
    answer = (answer or "").strip()
    if not answer:
        return default
    if re.fullmatch(r"\d+", answer):
        return f"td:nth-child({int(answer)})"
    return answer


class SelectorDiscovery:
    def __init__(
        self,
        page,
        *,
        base_url: str,
        ask: Callable[[str], str] = input,
        out: Callable[[str], None] = print,
        timeout_ms: int = 60000,
        preview_rows: int = 3,
    ) -> None:
        self.page = page
        self.base_url = base_url
        self.ask = ask
        self.out = out
        self.timeout_ms = timeout_ms
        self.preview_rows = preview_rows
        self.results_url: Optional[str] = None

    # -------------------------
    # Live-page primitives
    # -------------------------
    def count(self, selector: str) -> Optional[int]:
        """Number of matches, or None when the page rejects the selector."""
        try:
            return self.page.locator(selector).count()
        except PlaywrightError:
            return None

    def highlight(self, selector: str) -> Optional[int]:
        try:
            return self.page.locator(selector).evaluate_all(HIGHLIGHT_JS)
        except PlaywrightError:
            return None

    def report_candidates(self, candidates: List[str]) -> List[Tuple[str, int]]:
        found = []
        for selector in candidates:
            n = self.count(selector)
            if n:
                self.out(f"   Found {n} elements with: {selector}")
                found.append((selector, n))
        if not found:
            self.out("   None of the built-in candidates matched.")
        return found

    def confirm(self, label: str, selector: str, *, column: bool = False) -> str:
        """Highlight until the operator accepts (Enter) or keeps overriding."""
        while True:
            if not is_static_selector(selector):
                self.out(f"   ⚠️  '{selector}' is not plain CSS; the crawler could not read it from the page")
                answer = self.ask("Type a different selector: ").strip()
                if answer:
                    selector = column_selector(answer, selector) if column else answer
                continue
            n = self.highlight(selector)
            if n is None:
                self.out(f"   ⚠️  '{selector}' is not a valid selector on this page")
            else:
                self.out(f"\n✓ Highlighted {n} {label}. Check if this looks correct.")
            answer = self.ask("Press Enter to accept, or type a different selector: ").strip()
            if not answer:
                return selector
            selector = column_selector(answer, selector) if column else answer

    def _section(self, title: str) -> None:
        self.out(f"\n{RULE}\n{title}\n{RULE}")

    # -------------------------
    # Steps
    # -------------------------
    def step_rows(self) -> str:
        self._section("STEP 1: Identify Contact Rows")
        self.out("Identify what contains each contact entry (usually a table row or a div).\n")
        self.report_candidates(ROW_CANDIDATES)
        default = ROW_CANDIDATES[0]
        answer = self.ask(f'\nEnter the selector for contact rows (or press Enter to use "{default}"): ').strip()
        return self.confirm("contact rows", answer or default)

    def step_name(self, row_selector: str) -> str:
        self._section("STEP 2: Identify Name Link")
        self.out("Within each contact row, identify the link to the detail page.\n")
        self.report_candidates(NAME_CANDIDATES)
        answer = self.ask('\nEnter the selector for name links (or press Enter to use "td a"): ').strip()
        name_selector = self.confirm("name links", answer or "td a")
        self.preview(Selectors(contact_row=row_selector, name_link=name_selector))
        return name_selector

    def preview(self, selectors: Selectors) -> int:
        """Parse the current page the way the crawler will and show a few rows."""
        try:
            rows = extract_rows(self.page.content(), self.page.url, selectors)
        except (PlaywrightError, SelectolaxError) as e:
            self.out(f"   ⚠️  Could not preview rows: {e}")
            return 0
        self.out(f"\n   Crawler would read {len(rows)} rows from this page.")
        for raw in rows[: self.preview_rows]:
            rec = build_contact_record(raw)
            self.out(
                f"   - {raw.name} | {rec.address1} | {rec.city} {rec.state} {rec.zip} | "
                f"{rec.phone} | {raw.detail_href or '(no link)'}"
            )
        return len(rows)

    def step_column(self, step_no: int, label: str, default: str) -> str:
        self._section(f"STEP {step_no}: Identify {label} Column")
        self.out("Count the columns from left (starting at 1).\n")
        answer = self.ask(f"Enter the column number for {label.lower()}, or a CSS selector: ")
        return self.confirm(f"{label.lower()} cells", column_selector(answer, default), column=True)

    def step_email(self, selectors: Selectors) -> str:
        self._section("STEP 6: Test Detail Page for Email")
        default = Selectors().email
        try:
            rows = extract_rows(self.page.content(), self.page.url, selectors)
        except (PlaywrightError, SelectolaxError) as e:
            self.out(f"   ⚠️  Could not read rows ({e}); keeping the default.")
            return default
        target = next((r.detail_href for r in rows if r.detail_href), None)
        if target is None:
            self.out("   ⚠️  No detail link found with the chosen selectors; keeping the default.")
            return default
        self.out(f"Opening: {target}")
        try:
            self.page.goto(target, wait_until="domcontentloaded", timeout=self.timeout_ms)
            self.page.wait_for_timeout(1000)
        except PlaywrightError as e:
            self.out(f"   ⚠️  Could not open detail page: {e}; keeping the default.")
            return default
        self.out("\nNow on the detail page. Look for where the email is displayed.")
        for selector in EMAIL_CANDIDATES:
            try:
                handle = self.page.query_selector(selector)
                if handle is None:
                    continue
                text = handle.inner_text() or handle.get_attribute("href") or ""
            except PlaywrightError:
                continue
            self.out(f'   Found with "{selector}": {text[:50]}')
        try:
            html = self.page.content()
        except PlaywrightError as e:
            self.out(f"   ⚠️  Could not read detail page: {e}; keeping the default.")
            return default
        self.out(f"   Crawler strategies would extract: {find_email(html) or '(nothing)'}")
        answer = self.ask(f'\nEnter the selector for email (or press Enter to use \'{default}\'): ').strip()
        email_selector = answer or default
        if answer:
            self.out(f"   With this selector: {find_email(html, email_selector) or '(nothing)'}")
        return email_selector

    def step_next(self) -> str:
        self._section("STEP 7: Identify Next Page Button")
        if self.results_url and self.page.url != self.results_url:
            try:
                self.page.goto(self.results_url, wait_until="domcontentloaded", timeout=self.timeout_ms)
                self.page.wait_for_timeout(1000)
            except PlaywrightError as e:
                self.out(f"   ⚠️  Could not return to {self.results_url}: {e}")
                self.ask("Navigate back to the results page, then press Enter: ")
        self.out("\nBack on results page. Look for the next page button/link.\n")
        for selector in NEXT_CANDIDATES:
            try:
                found = self.page.query_selector(selector)
                if found is None:
                    continue
                try:
                    text = found.inner_text()
                except PlaywrightError:
                    text = "button"
            except PlaywrightError:
                continue
            self.out(f'   Found: {selector} -> "{text}"')
        default = Selectors().next_page
        answer = self.ask("\nEnter the selector for next page button: ").strip()
        selector = answer or default
        control = Paginator(next_selector=selector).find_next_control(self.page)
        if control is None:
            self.out("   ⚠️  Crawler would find no next-page control on this page.")
        elif is_disabled(control):
            self.out("   Next-page control found but disabled (last page?).")
        else:
            self.out("   ✓ Crawler would click an enabled next-page control.")
        return selector

    def run(self) -> SelectorConfig:
        self.out("📍 Opening browser and navigating to search page...")
        try:
            self.page.goto(self.base_url, wait_until="domcontentloaded", timeout=self.timeout_ms)
        except PlaywrightError as e:
            self.out(f"⚠️  Could not open {self.base_url}: {e}")
            self.out("   Navigate to the search page manually in the browser window.")
        self.out("\n⏳ Please log in if required.")
        self.ask("Press Enter when search results are visible: ")
        self.results_url = self.page.url

        row = self.step_rows()
        name = self.step_name(row)
        address = self.step_column(3, "Address", "td:nth-child(2)")
        city = self.step_column(4, "City/State/Zip", "td:nth-child(3)")
        phone = self.step_column(5, "Phone", "td:nth-child(4)")
        partial = Selectors(contact_row=row, name_link=name, address=address, city_state_zip=city, phone=phone)
        email = self.step_email(partial)
        next_page = self.step_next()

        config = SelectorConfig(
            base_url=self.base_url,
            selectors=partial.model_copy(update={"email": email, "next_page": next_page}),
        )
        self._section("CONFIGURATION COMPLETE")
        return config
