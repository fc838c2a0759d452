from __future__ import annotations

import sys

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

# Anything that plausibly marks a rendered result listing
LISTING_MARKERS = (
    'table.searchResults, .search-results, .member-list, '
    '[class*="result"], [id*="result"], table tbody tr'
)


def wait_for_login(page, *, timeout_ms: int = 300000, extra_marker: str | None = None) -> bool:
    """Block until a result listing appears, giving a human time to log in.

    Returns True when a marker showed up. On timeout a warning is printed and
    False returned; the crawl proceeds anyway.
    """
    markers = LISTING_MARKERS
    if extra_marker:
        markers = f"{extra_marker}, {markers}"
    print("\n⏳ Waiting for search results to load...")
    print("   If you need to log in, please do so in the browser window.")
    print("   The crawl continues automatically once results appear.\n")
    try:
        page.wait_for_selector(markers, timeout=timeout_ms)
    except PlaywrightTimeoutError:
        print("⚠️  Could not detect search results. Proceeding anyway...", file=sys.stderr)
        return False
    print("✅ Search results detected.")
    return True
