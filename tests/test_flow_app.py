"""
Flow App 테스트

입력 파일 대신 FakeTailer를 사용하여 메인 루프의 이벤트 처리를 검증합니다.
"""

import pytest

from conftest import FakeScreen
from flow.config.config_manager import Configuration, Filter
from flow.config.settings import Settings
from flow.core.flow_session import Direction, FlowSession
from flow.ui.app import FlowApp
from flow.ui.screen import Event, EventType


class FakeTailer:
    """FileTailer 대체 객체"""

    def __init__(self, lines, pending=None):
        self.path = "fake.log"
        self.lines = lines
        self.pending = list(pending or [])
        self.requested = None

    def read_last(self, count):
        self.requested = count
        return self.lines[-count:] if count > 0 else []

    def poll(self):
        lines, self.pending = self.pending, []
        return lines


@pytest.fixture
def app():
    config = Configuration(
        filters=[Filter(name="All"), Filter(name="Errors", contains="ERROR")]
    )
    session = FlowSession(config, 100, width=40, height=10)
    tailer = FakeTailer(
        [f"INFO {i}" for i in range(20)] + ["ERROR last"],
        pending=["ERROR new", "INFO new"],
    )
    return FlowApp(session, tailer, Settings(lines=5, max_lines=100))


def test_load_initial_lines(app):
    assert app.load_initial_lines() == 5
    assert app.tailer.requested == 5
    assert [line.text for line in app.session.buffer][-1] == "ERROR last"


def test_poll_input(app):
    app.load_initial_lines()

    assert app.poll_input() == 2
    assert app.poll_input() == 0
    assert len(app.session.buffer) == 7


def test_quit_event(app):
    assert app.handle_event(Event(EventType.QUIT)) is False
    assert app.handle_event(Event(EventType.OTHER)) is True


def test_select_menu_item(app):
    app.load_initial_lines()

    app.handle_event(Event(EventType.SELECT_MENU_ITEM, Direction.RIGHT))

    assert app.session.active_filter.name == "Errors"
    assert [entry.line.text for entry in app.session.rendered] == ["ERROR last"]


def test_scroll_events(app):
    app.session.ingest([f"INFO {i}" for i in range(30)])

    app.handle_event(Event(EventType.SCROLL, 3))
    assert app.session.reverse_offset == 3

    app.handle_event(Event(EventType.SCROLL_BOTTOM))
    assert app.session.reverse_offset == 0

    app.handle_event(Event(EventType.SCROLL_TOP))
    assert app.session.reverse_offset == app.session.max_offset()


def test_search_prompt(app):
    """'/' 입력 후 검색어를 입력하고 Enter로 검색"""
    app.load_initial_lines()

    app.handle_event(Event(EventType.START_SEARCH))
    assert app.prompt == ""

    for char in "ERRX":
        app.handle_event(Event(EventType.PROMPT_INPUT, char))
    app.handle_event(Event(EventType.PROMPT_BACKSPACE))
    app.handle_event(Event(EventType.PROMPT_INPUT, "O"))
    assert app.prompt == "ERRO"

    app.handle_event(Event(EventType.PROMPT_SUBMIT))

    assert app.prompt is None
    assert app.session.search_query == "ERRO"
    assert app.session.match_status() == "1/1"

    app.handle_event(Event(EventType.CLEAR_SEARCH))
    assert app.session.search_query is None


def test_search_prompt_cancel(app):
    app.handle_event(Event(EventType.START_SEARCH))
    app.handle_event(Event(EventType.PROMPT_INPUT, "a"))
    app.handle_event(Event(EventType.PROMPT_CANCEL))

    assert app.prompt is None
    assert app.session.search_query is None


def test_run_until_quit(app, fake_curses):
    screen = FakeScreen(width=40, height=10, keys=["x", "q"])

    assert app.run(wrapper=lambda main: main(screen)) == 0
    assert len(app.session.buffer) == 7
    assert "ERROR new" in [line.text for line in app.session.buffer]


def test_run_interrupted(app):
    def interrupted(main):
        raise KeyboardInterrupt

    assert app.run(wrapper=interrupted) == 0
