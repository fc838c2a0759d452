"""
Row Extraction Logic - Results Rows to Contact Records

Reads a snapshot of a loaded results page (selectolax), enumerates the
contact rows matched by the configured selectors, and turns each row into a
ContactRecord using layered heuristics:

1. row-wide regex guesses (phone, street address, city/state/zip)
2. column-scoped refinement, which overrides the row-wide guesses

Row/name/column selectors are evaluated by selectolax, so they must be plain
CSS (no Playwright-only pseudo-classes such as :has-text).
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional
from urllib.parse import urljoin

from selectolax.lexbor import LexborHTMLParser, LexborNode, SelectolaxError

from ..schemas import ContactRecord, RawRow, Selectors
from .parsers import clean_phone, parse_address, parse_name


PHONE_RE = re.compile(r"(\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4})")
STREET_RE = re.compile(r"(\d+\s+[A-Za-z0-9\s,.#-]+)")
ROW_CITY_STATE_ZIP_RE = re.compile(r"([A-Za-z\s]+),?\s+([A-Z]{2})\s+(\d{5}(?:-\d{4})?)")
CELL_CITY_STATE_ZIP_RE = re.compile(r"^([A-Za-z\s]+),?\s+([A-Z]{2})\s+(\d{5}(?:-\d{4})?)$")
LEADING_DIGIT_RE = re.compile(r"^\d+\s")

SKIP_TAGS = {"script", "style", "noscript", "template", "head"}
BLOCK_TAGS = {
    "p", "div", "li", "ul", "ol", "tr", "table", "tbody", "thead", "tfoot",
    "section", "article", "header", "footer", "h1", "h2", "h3", "h4", "h5", "h6",
    "address", "dl", "dt", "dd", "form", "fieldset", "blockquote", "pre",
}
CELL_TAGS = {"td", "th"}


def _children(node: LexborNode) -> List[LexborNode]:
    return list(node.iter(include_text=True))


def _walk_text(node: LexborNode, parts: List[str]) -> None:
    # Explicit stack; detail pages can nest deeper than the recursion limit
    stack = [(child, False) for child in reversed(_children(node))]
    while stack:
        child, closing = stack.pop()
        tag = child.tag
        if closing:
            if tag in CELL_TAGS:
                parts.append("\t")
            elif tag in BLOCK_TAGS:
                parts.append("\n")
        elif tag == "-text":
            parts.append(re.sub(r"\s+", " ", child.text_content or ""))
        elif tag == "br":
            parts.append("\n")
        elif tag is None or tag in SKIP_TAGS or tag.startswith("-"):
            continue
        else:
            if tag in BLOCK_TAGS:
                parts.append("\n")
            stack.append((child, True))
            stack.extend((c, False) for c in reversed(_children(child)))


def visible_text(node: Optional[LexborNode]) -> str:
    """Approximate the browser's innerText for a node.

    Line breaks come from <br> and block elements, table cells are separated
    by tabs and source whitespace is collapsed.
    """
    if node is None:
        return ""
    parts: List[str] = []
    _walk_text(node, parts)
    text = "".join(parts)
    lines = []
    for line in text.split("\n"):
        line = re.sub(r" *\t *", "\t", line).strip(" \t")
        if line:
            lines.append(line)
    return "\n".join(lines)


def _one_line(text: str) -> str:
    return " ".join(text.split())


def _detail_href(link: LexborNode, page_url: str) -> str | None:
    href = (link.attrs.get("href") or "").strip()
    if not href or href.startswith("#") or href.lower().startswith("javascript:"):
        return None
    return urljoin(page_url, href)


_EMPTY_DOC = LexborHTMLParser("<html><body></body></html>")


def is_static_selector(selector: str) -> bool:
    """True when the snapshot parser can evaluate ``selector``."""
    try:
        _EMPTY_DOC.css(selector)
    except SelectolaxError:
        return False
    return True


def unusable_selectors(selectors: Selectors) -> Dict[str, str]:
    """Row/name/column locators the snapshot parser rejects, keyed by field."""
    scoped = {"contact_row": selectors.contact_row, "name_link": selectors.name_link}
    scoped.update(selectors.column_selectors())
    return {k: v for k, v in scoped.items() if not is_static_selector(v)}


def extract_rows(html: str, page_url: str, selectors: Selectors) -> List[RawRow]:
    """Enumerate contact rows on a results page snapshot.

    Header rows (containing a <th>) and rows without a name link are
    skipped. An empty list is a valid result.
    """
    parser = LexborHTMLParser(html or "")
    rows: List[RawRow] = []
    seen = set()
    matched = []
    # Overlapping selector lists can report one element twice
    for row in parser.css(selectors.contact_row):
        if row.mem_id not in seen:
            seen.add(row.mem_id)
            matched.append(row)
    for index, row in enumerate(matched):
        if row.css_first("th") is not None:
            continue
        link = row.css_first(selectors.name_link)
        if link is None:
            continue
        column_texts: Dict[str, str] = {}
        for key, sel in selectors.column_selectors().items():
            cell = row.css_first(sel)
            column_texts[key] = visible_text(cell) if cell is not None else ""
        rows.append(
            RawRow(
                index=index,
                name=_one_line(visible_text(link)),
                detail_href=_detail_href(link, page_url),
                row_text=visible_text(row),
                cell_texts=tuple(visible_text(td) for td in row.css("td")),
                column_texts=column_texts,
            )
        )
    return rows


def _name_column(raw: RawRow) -> int:
    for i, cell in enumerate(raw.cell_texts):
        if raw.name and raw.name in _one_line(cell):
            return i
    return 0


class _ColumnPass:
    """Column-scoped refinement. The first matching column per field wins."""

    def __init__(self, fields: Dict[str, str]):
        self.fields = fields
        self.phone_set = False
        self.city_set = False
        self.address_set = False

    def try_phone(self, cell: str) -> bool:
        if self.phone_set:
            return False
        m = PHONE_RE.search(cell)
        if not m:
            return False
        self.fields["phone"] = clean_phone(m.group(1))
        self.phone_set = True
        return True

    def try_city(self, cell: str) -> bool:
        if self.city_set:
            return False
        m = CELL_CITY_STATE_ZIP_RE.match(cell.strip())
        if not m:
            return False
        self.fields["city"] = m.group(1).strip()
        self.fields["state"] = m.group(2)
        self.fields["zip"] = m.group(3)
        self.city_set = True
        return True

    def try_address(self, cell: str) -> bool:
        if self.address_set or not LEADING_DIGIT_RE.match(cell.strip()):
            return False
        parts = parse_address(cell)
        self.fields["address1"] = parts["address1"]
        self.fields["address2"] = parts["address2"]
        if parts["city"] and not self.city_set:
            self.fields["city"] = parts["city"]
            self.fields["state"] = parts["state"]
            self.fields["zip"] = parts["zip"]
        self.address_set = True
        return True

    def scan(self, cell: str) -> None:
        # One column contributes to at most one field
        if self.try_phone(cell):
            return
        if self.try_city(cell):
            return
        self.try_address(cell)


def build_contact_record(raw: RawRow) -> ContactRecord:
    """Turn a RawRow into a ContactRecord (email left empty)."""
    fields: Dict[str, str] = dict(parse_name(raw.name))
    fields.update({"address1": "", "address2": "", "city": "", "state": "", "zip": "", "phone": ""})
    text = raw.row_text or ""

    m = PHONE_RE.search(text)
    if m:
        fields["phone"] = clean_phone(m.group(1))

    m = STREET_RE.search(text)
    if m:
        parts = parse_address(m.group(1))
        fields["address1"] = parts["address1"]
        fields["address2"] = parts["address2"]

    m = ROW_CITY_STATE_ZIP_RE.search(text)
    if m:
        fields["city"] = m.group(1).strip()
        fields["state"] = m.group(2)
        fields["zip"] = m.group(3)

    if len(raw.cell_texts) > 1:
        columns = _ColumnPass(fields)
        configured = raw.column_texts or {}
        if configured.get("phone"):
            columns.try_phone(configured["phone"])
        if configured.get("city_state_zip"):
            columns.try_city(configured["city_state_zip"])
        if configured.get("address"):
            columns.try_address(configured["address"])
        start = _name_column(raw) + 1
        for cell in raw.cell_texts[start:]:
            columns.scan(cell)

    return ContactRecord(**fields)
