"""
Directory Contact Crawler - Selector Discovery CLI

Opens a visible browser on the directory search page and walks the operator
through choosing the selectors the crawler needs. The result is written as
a selector config (JSON for *.json targets, YAML otherwise).

Usage:
  python -m dcc.discover --base-url https://example.org/search --out scraper_config.json

Exit codes:
  0 - configuration saved
  1 - bad arguments
  2 - config could not be written
  130 - interrupted (nothing saved)
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dircrawl.config import DEFAULT_SELECTOR_CONFIG, save_selector_config
from dircrawl.pipeline.discovery import SelectorDiscovery
from dircrawl.pipeline.fetchers.browser import BrowserSession
from dircrawl.schemas import DEFAULT_BASE_URL


DISCOVERY_VIEWPORT = (1280, 900)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="dcc.discover", description="Interactive selector discovery")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="Directory search page URL")
    parser.add_argument("--out", "-o", default=str(DEFAULT_SELECTOR_CONFIG), help="Where to save the selector config (default: scraper_config.json)")
    parser.add_argument("--slow-mo", type=int, default=100, help="Delay between browser actions in ms (default 100)")
    parser.add_argument("--timeout", type=int, default=60000, help="Navigation timeout in ms (default 60000)")
    args = parser.parse_args(argv)

    if not args.base_url.startswith(("http://", "https://")):
        print(f"Config error: base URL must be http(s): {args.base_url}", file=sys.stderr)
        return 1

    print("🔍 Selector Discovery Tool\n")
    print("This tool will help you identify the correct CSS selectors for the directory.")
    print("Follow the instructions in the terminal and inspect the page in the browser.\n")

    try:
        with BrowserSession(
            headless=False,
            slow_mo_ms=args.slow_mo,
            timeout_ms=args.timeout,
            viewport=DISCOVERY_VIEWPORT,
        ) as session:
            tool = SelectorDiscovery(session.page, base_url=args.base_url, timeout_ms=args.timeout)
            config = tool.run()
    except KeyboardInterrupt:
        print("\n⛔ Discovery cancelled; nothing saved.", file=sys.stderr)
        return 130

    print("\nYour configuration:")
    print(json.dumps(config.to_document(), indent=2))
    try:
        path = save_selector_config(config, args.out)
    except OSError as e:
        print(f"Output error: cannot write {args.out}: {e}", file=sys.stderr)
        return 2
    print(f"\n💾 Configuration saved to: {path}")
    print("You can now run the crawler: python -m dcc.run --config", path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
