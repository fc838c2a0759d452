"""
Crawl Orchestrator - sequential directory crawl

    IDLE -> GATING -> EXTRACTING_PAGE -> VISITING_DETAILS -> PAGINATING
         -> EXTRACTING_PAGE (next page) | COMPLETED | ERROR

Single page, single thread: rows are processed one at a time and every
detail visit is followed by a return to the results page it came from.
Any unhandled exception ends the run in ERROR after one unconditional
flush of the accumulated records. Nothing is retried.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..ops_logger import NullOpsLogger
from ..schemas import ContactRecord, CrawlPhase, CrawlSettings, RawRow, SelectorConfig
from .detail import DetailVisitor
from .extractors import build_contact_record, extract_rows
from .gate import wait_for_login
from .pagination import Paginator, current_page_number
from .writer import CheckpointWriter


@dataclass
class CrawlState:
    """Mutable run state, owned by the orchestrator."""
    records: List[ContactRecord]
    current_page_number: int = 1
    saw_another_page: bool = False
    pages_processed: int = 0
    phase: CrawlPhase = CrawlPhase.IDLE


@dataclass
class CrawlResult:
    phase: CrawlPhase
    records: List[ContactRecord]
    pages_processed: int
    output_path: Path
    error: Optional[str] = None
    transitions: List[CrawlPhase] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.phase == CrawlPhase.COMPLETED


class CrawlOrchestrator:
    def __init__(
        self,
        page,
        config: SelectorConfig,
        settings: CrawlSettings,
        writer: CheckpointWriter,
        *,
        detail_visitor: Optional[DetailVisitor] = None,
        paginator: Optional[Paginator] = None,
        ops_logger=None,
    ) -> None:
        self.page = page
        self.config = config
        self.settings = settings
        self.writer = writer
        self.detail_visitor = detail_visitor or DetailVisitor(
            email_selector=config.selectors.email,
            timeout_ms=settings.timeout_ms,
        )
        self.paginator = paginator or Paginator(
            next_selector=config.selectors.next_page,
            delay_ms=settings.delay_between_pages_ms,
            timeout_ms=settings.timeout_ms,
        )
        self.ops = ops_logger or NullOpsLogger()
        self.state = CrawlState(records=writer.records)
        self.transitions: List[CrawlPhase] = [CrawlPhase.IDLE]

    @property
    def base_url(self) -> str:
        return self.settings.base_url or self.config.base_url

    def _enter(self, phase: CrawlPhase) -> None:
        self.state.phase = phase
        self.transitions.append(phase)

    def _goto(self, url: str) -> None:
        self.page.goto(url, wait_until="domcontentloaded", timeout=self.settings.timeout_ms)

    def _process_row(self, raw: RawRow, position: int, total: int, results_url: str) -> ContactRecord:
        print(f"   [{position}/{total}] Processing: {raw.name}")
        record = build_contact_record(raw)
        if raw.detail_href:
            failures_before = self.detail_visitor.failures
            record.email = self.detail_visitor.visit(self.page, raw.detail_href)
            if self.detail_visitor.failures > failures_before:
                self.ops.event("detail_failed", url=raw.detail_href, name=raw.name)
            elif not record.email:
                self.ops.event("detail_no_email", url=raw.detail_href, name=raw.name)
            # Detail navigation replaced the results page
            self._goto(results_url)
        if self.writer.add(record):
            print(f"   💾 Progress saved ({len(self.writer)} contacts)")
            self.ops.event("checkpoint", records=len(self.writer), path=str(self.writer.path))
        self.page.wait_for_timeout(self.settings.delay_between_contacts_ms)
        return record

    def _crawl_page(self) -> None:
        html = self.page.content()
        results_url = self.page.url
        rows = extract_rows(html, results_url, self.config.selectors)
        reported = current_page_number(html)
        print(f"\n📄 Processing page {self.state.current_page_number} (site page {reported})...")
        print(f"   Found {len(rows)} contacts on this page")

        self._enter(CrawlPhase.VISITING_DETAILS)
        for position, raw in enumerate(rows, start=1):
            self._process_row(raw, position, len(rows), results_url)
        self.state.pages_processed += 1
        self.ops.event(
            "page",
            page=self.state.current_page_number,
            site_page=reported,
            rows=len(rows),
            total_records=len(self.writer),
        )

    def _advance(self) -> bool:
        """PAGINATING: True when another page was opened."""
        if self.state.current_page_number >= self.settings.max_pages:
            print(f"\n✓ Reached page limit ({self.settings.max_pages}).")
            self.state.saw_another_page = False
            return False
        self.state.saw_another_page = self.paginator.go_next(self.page)
        if not self.state.saw_another_page:
            print("\n✓ No more pages to process.")
            return False
        self.state.current_page_number += 1
        return True

    def _result(self, error: Optional[str] = None) -> CrawlResult:
        return CrawlResult(
            phase=self.state.phase,
            records=list(self.writer.records),
            pages_processed=self.state.pages_processed,
            output_path=self.writer.path,
            error=error,
            transitions=list(self.transitions),
        )

    def run(self) -> CrawlResult:
        self.ops.event("crawl_start", base_url=self.base_url, max_pages=self.settings.max_pages)
        try:
            self._enter(CrawlPhase.GATING)
            print(f"📍 Navigating to: {self.base_url}")
            self._goto(self.base_url)
            detected = wait_for_login(
                self.page,
                timeout_ms=self.settings.login_timeout_ms,
                extra_marker=self.config.selectors.contact_row,
            )
            self.ops.event("gate", listing_detected=detected)

            while True:
                self._enter(CrawlPhase.EXTRACTING_PAGE)
                self._crawl_page()
                self._enter(CrawlPhase.PAGINATING)
                if not self._advance():
                    break

            self.writer.flush()
            self._enter(CrawlPhase.COMPLETED)
        except Exception as e:
            self._enter(CrawlPhase.ERROR)
            print(f"\n❌ Error during crawl: {e}", file=sys.stderr)
            try:
                self.writer.flush()
                print(f"   💾 Saved {len(self.writer)} contacts before error", file=sys.stderr)
            except OSError as flush_error:
                print(f"   ❌ Could not save partial results: {flush_error}", file=sys.stderr)
            self.ops.event("crawl_end", phase=self.state.phase.value, records=len(self.writer), error=str(e))
            return self._result(error=str(e))

        self.ops.event("crawl_end", phase=self.state.phase.value, records=len(self.writer), pages=self.state.pages_processed)
        return self._result()
