from typing import Dict, Optional

import pytest

from dircrawl.pipeline.pagination import NEXT_PAGE_HEURISTICS, Paginator, current_page_number, is_disabled


class StubControl:
    def __init__(self, text: str = "Next", attrs: Optional[Dict[str, str]] = None, click_error: Exception | None = None):
        self.text = text
        self.attrs = attrs or {}
        self.click_error = click_error
        self.clicked = 0

    def get_attribute(self, name: str):
        return self.attrs.get(name)

    def click(self):
        if self.click_error:
            raise self.click_error
        self.clicked += 1


class StubPage:
    def __init__(self, controls: Optional[Dict[str, StubControl]] = None):
        self.controls = controls or {}
        self.queried = []
        self.waits = []
        self.load_states = []

    def query_selector(self, selector: str):
        self.queried.append(selector)
        return self.controls.get(selector)

    def wait_for_timeout(self, ms):
        self.waits.append(ms)

    def wait_for_load_state(self, state, timeout=None):
        self.load_states.append((state, timeout))


@pytest.mark.parametrize("attrs", [
    {"class": "btn disabled"},
    {"disabled": ""},
    {"aria-disabled": "true"},
    {"aria-disabled": "TRUE "},
])
def test_is_disabled_markers(attrs):
    assert is_disabled(StubControl(attrs=attrs))


def test_is_disabled_false_for_plain_control():
    assert not is_disabled(StubControl(attrs={"class": "next", "aria-disabled": "false"}))


def test_go_next_clicks_enabled_control_and_waits():
    control = StubControl()
    page = StubPage({'a:has-text("Next")': control})
    pager = Paginator(next_selector='a:has-text("Next")', delay_ms=250, timeout_ms=999)

    assert pager.go_next(page) is True
    assert control.clicked == 1
    assert page.waits == [250]
    assert page.load_states == [("domcontentloaded", 999)]


def test_disabled_control_means_no_next_page_regardless_of_text():
    control = StubControl(text="Next »", attrs={"class": "disabled"})
    page = StubPage({'a:has-text("Next")': control})

    assert Paginator(next_selector='a:has-text("Next")').go_next(page) is False
    assert control.clicked == 0
    assert page.waits == []


def test_heuristic_set_used_when_configured_selector_misses():
    control = StubControl(text="›")
    page = StubPage({NEXT_PAGE_HEURISTICS: control})

    assert Paginator(next_selector="a.custom-next").go_next(page) is True
    assert page.queried == ["a.custom-next", NEXT_PAGE_HEURISTICS]


def test_missing_control_means_no_next_page():
    page = StubPage()
    assert Paginator().go_next(page) is False
    assert page.queried == [NEXT_PAGE_HEURISTICS]


def test_exception_is_treated_as_no_next_page(capsys):
    control = StubControl(click_error=RuntimeError("element detached"))
    page = StubPage({NEXT_PAGE_HEURISTICS: control})

    assert Paginator().go_next(page) is False
    assert "element detached" in capsys.readouterr().err


def test_current_page_number_from_active_item():
    html = '<ul class="pagination"><li><a>1</a></li><li class="active">3</li><li><a>4</a></li></ul>'
    assert current_page_number(html) == 3


def test_current_page_number_from_page_x_of_y_text():
    assert current_page_number("<p>Showing Page 7 of 12</p>") == 7


def test_current_page_number_defaults_to_one():
    assert current_page_number("<p>Results</p>") == 1
    assert current_page_number("") == 1
