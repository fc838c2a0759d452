"""
Directory Contact Crawler - CLI Runner

Usage:
  python -m dcc.run --config scraper_config.json --output contacts_export.csv

With a settings file and a few overrides:
  python -m dcc.run --settings config/crawl.yaml --max-pages 5 --headless

Exit codes:
  0 - success
  1 - config error (selector config or settings file invalid)
  2 - output error (output location not writable)
  3 - crawl error (fatal failure; partial results were flushed)
  130 - interrupted (Ctrl+C; partial results were flushed)
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from playwright.sync_api import Error as PlaywrightError

from dircrawl.config import DEFAULT_SELECTOR_CONFIG, ConfigError, load_selector_config, load_settings
from dircrawl.ops_logger import NullOpsLogger, OpsLogger
from dircrawl.pipeline.crawl import CrawlOrchestrator
from dircrawl.pipeline.fetchers.browser import BrowserSession
from dircrawl.pipeline.writer import CheckpointWriter


def ensure_output_writable(output_path: Path) -> None:
    """Raise OSError when the output file's directory cannot be written."""
    out_dir = output_path.parent
    out_dir.mkdir(parents=True, exist_ok=True)
    test_file = out_dir / ".write_test"
    test_file.write_text("ok", encoding="utf-8")
    test_file.unlink(missing_ok=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dcc.run", description="Directory contact crawler")
    parser.add_argument("--config", "-c", default=str(DEFAULT_SELECTOR_CONFIG), help="Selector config JSON/YAML (default: scraper_config.json; built-in defaults when missing)")
    parser.add_argument("--settings", "-s", default=None, help="YAML settings file with a 'crawl:' section")
    parser.add_argument("--base-url", default=None, help="Directory search page URL (overrides settings and selector config)")
    parser.add_argument("--output", "-o", default=None, help="Output CSV path (default: contacts_export.csv)")
    parser.add_argument("--headless", action="store_true", default=None, help="Run the browser headless (login must not be required)")
    parser.add_argument("--slow-mo", type=int, default=None, help="Delay between browser actions in ms (default 100)")
    parser.add_argument("--timeout", type=int, default=None, help="Page load timeout in ms (default 30000)")
    parser.add_argument("--max-pages", type=int, default=None, help="Maximum number of result pages (default 30)")
    parser.add_argument("--contact-delay", type=int, default=None, help="Pause between contacts in ms (default 500)")
    parser.add_argument("--page-delay", type=int, default=None, help="Pause after clicking next page in ms (default 1000)")
    parser.add_argument("--login-timeout", type=int, default=None, help="How long to wait for results to appear in ms (default 300000)")
    parser.add_argument("--checkpoint-every", type=int, default=None, help="Flush the CSV every N contacts (default 10)")
    parser.add_argument("--ops-log", default=None, help="Path to ops JSONL log file (disabled by default)")
    parser.add_argument("--ops-stdout", action="store_true", help="Also mirror ops JSON to stdout")
    return parser


def main(argv: list[str] | None = None) -> int:
    # Python 3.11+ gate
    if sys.version_info < (3, 11):
        cur = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
        print(f"Python 3.11+ required. Current: {cur}", file=sys.stderr)
        return 1

    args = build_parser().parse_args(argv)

    try:
        config = load_selector_config(args.config)
        settings = load_settings(
            args.settings,
            {
                "base_url": args.base_url,
                "output": args.output,
                "headless": args.headless,
                "slow_mo_ms": args.slow_mo,
                "timeout_ms": args.timeout,
                "max_pages": args.max_pages,
                "delay_between_contacts_ms": args.contact_delay,
                "delay_between_pages_ms": args.page_delay,
                "login_timeout_ms": args.login_timeout,
                "checkpoint_every": args.checkpoint_every,
            },
        )
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1

    output_path = Path(settings.output)
    try:
        ensure_output_writable(output_path)
    except OSError as e:
        print(f"Output error: cannot write to {output_path}: {e}", file=sys.stderr)
        return 2

    if args.ops_log:
        ops_logger = OpsLogger(Path(args.ops_log), also_stdout=bool(args.ops_stdout))
    else:
        ops_logger = NullOpsLogger()

    print("🚀 Starting directory contact crawler...\n")
    print(f"Python: {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    print(f"Output: {output_path}")

    try:
        with CheckpointWriter(output_path, checkpoint_every=settings.checkpoint_every) as writer:
            with BrowserSession(
                headless=settings.headless,
                slow_mo_ms=settings.slow_mo_ms,
                timeout_ms=settings.timeout_ms,
                viewport=(settings.viewport_width, settings.viewport_height),
            ) as session:
                orchestrator = CrawlOrchestrator(session.page, config, settings, writer, ops_logger=ops_logger)
                result = orchestrator.run()
    except KeyboardInterrupt:
        print(f"\n⛔ Interrupted. Partial results saved to {output_path}", file=sys.stderr)
        return 130
    except PlaywrightError as e:
        print(f"Browser error: {e}", file=sys.stderr)
        return 3

    print("\n" + "=" * 50)
    print(f"🏁 Total contacts: {len(result.records)}")
    print(f"   Pages processed: {result.pages_processed}")
    print(f"   Saved to: {result.output_path}")
    print("=" * 50)

    if not result.ok:
        print(f"Crawl error: {result.error}", file=sys.stderr)
        return 3
    print("\n✅ Scraping complete!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
