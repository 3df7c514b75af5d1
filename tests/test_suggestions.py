# tests/test_suggestions.py
import threading
import time

import pytest

from shelftaught.errors import GatewayError
from shelftaught.models import GatewayResult, SuggestionModel
from shelftaught.suggestions import Debouncer, SuggestionBox, parse_suggestions

SUGGESTIONS = [
    {"id": "1", "type": "curriculum", "text": "Saxon Math", "subtitle": "Saxon Publishers"},
    {"id": "1", "type": "subject", "text": "Mathematics", "subtitle": "Subject - 4 curricula"},
]


class SuggestionGateway:
    def __init__(self, fail=False):
        self.queries = []
        self.fail = fail
        self.answered = threading.Event()

    def get_search_suggestions(self, query, limit=None):
        self.queries.append(query)
        try:
            if self.fail:
                raise GatewayError("backend down")
            return GatewayResult(data={"success": True, "data": {"suggestions": SUGGESTIONS}})
        finally:
            self.answered.set()


def wait_for(predicate, timeout=2.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def searches():
    return []


@pytest.fixture
def gateway_stub():
    return SuggestionGateway()


@pytest.fixture
def box(gateway_stub, searches):
    box = SuggestionBox(gateway_stub, searches.append)
    yield box
    box.close()


def test_short_input_never_requests(box, gateway_stub):
    box.type("s")
    time.sleep(0.45)

    assert gateway_stub.queries == []
    assert box.suggestions == []
    assert not box.visible


def test_pause_after_typing_sends_one_request(box, gateway_stub):
    box.type("sa")
    assert gateway_stub.queries == []

    assert gateway_stub.answered.wait(2)
    assert wait_for(lambda: box.visible)
    time.sleep(0.1)
    assert gateway_stub.queries == ["sa"]
    assert [s.text for s in box.suggestions] == ["Saxon Math", "Mathematics"]


def test_rapid_typing_sends_only_the_last_value(box, gateway_stub):
    for text in ("sa", "sax", "saxo", "saxon"):
        box.type(text)
        time.sleep(0.05)

    assert gateway_stub.answered.wait(2)
    time.sleep(0.4)
    assert gateway_stub.queries == ["saxon"]


def test_clearing_input_cancels_pending_request(box, gateway_stub):
    box.type("sa")
    box.type("")
    time.sleep(0.45)
    assert gateway_stub.queries == []


def test_backend_failure_leaves_list_empty(searches):
    failing = SuggestionGateway(fail=True)
    box = SuggestionBox(failing, searches.append, delay=0.01)

    box.type("sax")
    assert failing.answered.wait(2)
    assert wait_for(lambda: not box.loading)
    assert box.suggestions == []
    assert not box.visible


def show(box, text="sa"):
    with box._lock:
        box.text = text
        box.suggestions = [SuggestionModel(**s) for s in SUGGESTIONS]
        box.visible = True


def test_arrow_keys_move_selection_within_bounds(box):
    show(box)

    assert box.press("ArrowDown")
    assert box.selected_index == 0
    box.press("ArrowDown")
    box.press("ArrowDown")
    assert box.selected_index == 1

    box.press("ArrowUp")
    box.press("ArrowUp")
    assert box.selected_index == -1


def test_enter_on_selection_searches_for_it(box, searches):
    show(box)
    box.press("ArrowDown")

    box.press("Enter")

    assert searches == ["Saxon Math"]
    assert box.text == "Saxon Math"
    assert not box.visible


def test_enter_without_selection_submits_text(box, searches):
    show(box, "  phonics ")
    box.press("Enter")
    assert searches == ["phonics"]


def test_escape_hides_and_blurs(box):
    show(box)
    box.focus()
    box.press("ArrowDown")

    assert box.press("Escape")
    assert not box.visible
    assert not box.focused
    assert box.selected_index == -1


def test_keys_while_hidden(box, searches):
    box.text = "history"
    assert not box.press("ArrowDown")
    assert box.press("Enter")
    assert searches == ["history"]

    box.text = "   "
    box.press("Enter")
    assert searches == ["history"]


def test_focus_reopens_existing_suggestions(box):
    show(box)
    box.blur()
    assert not box.visible
    box.focus()
    assert box.visible


def test_parse_suggestions_skips_malformed_items():
    payload = {"data": {"suggestions": [SUGGESTIONS[0], {"type": "subject"}]}}
    parsed = parse_suggestions(payload)
    assert [s.text for s in parsed] == ["Saxon Math"]
    assert parse_suggestions(None) == []


def test_debouncer_cancel():
    calls = []
    debouncer = Debouncer(calls.append, delay=0.05)
    debouncer.call("x")
    assert debouncer.pending
    debouncer.cancel()
    time.sleep(0.1)
    assert calls == []
    assert not debouncer.pending
