"""
Screen 모듈

curses 화면 초기화, 내용/메뉴 그리기, 키 입력을 이벤트로 변환하는 기능을 구현합니다.
"""

import curses
import locale
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple, Union

from flow.core.flow_session import Direction, FlowSession, VisibleRow
from flow.models.line import clip_width, text_width
from flow.ui.color import ColorPairs
from flow.ui.renderer import match_ranges, menu_layout, row_spans

logger = logging.getLogger(__name__)

# getmouse() 결과를 키 입력처럼 다루기 위한 값
MOUSE_WHEEL_UP = "<wheel-up>"
MOUSE_WHEEL_DOWN = "<wheel-down>"

ESCAPE = "\x1b"
ENTER_KEYS = ("\n", "\r", curses.KEY_ENTER)
BACKSPACE_KEYS = ("\x7f", "\b", curses.KEY_BACKSPACE)

# halfdelay 단위는 1/10초
INPUT_TIMEOUT_TENTHS = 1


class EventType(Enum):
    SELECT_MENU_ITEM = "select_menu_item"
    SCROLL = "scroll"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    SCROLL_TOP = "scroll_top"
    SCROLL_BOTTOM = "scroll_bottom"
    START_SEARCH = "start_search"
    NEXT_MATCH = "next_match"
    PREVIOUS_MATCH = "previous_match"
    CLEAR_SEARCH = "clear_search"
    PROMPT_INPUT = "prompt_input"
    PROMPT_BACKSPACE = "prompt_backspace"
    PROMPT_SUBMIT = "prompt_submit"
    PROMPT_CANCEL = "prompt_cancel"
    RESIZE = "resize"
    QUIT = "quit"
    OTHER = "other"


@dataclass(frozen=True)
class Event:
    type: EventType
    value: Any = None


Key = Union[str, int]


def translate_key(key: Key, prompting: bool = False) -> Event:
    """
    키 입력을 이벤트로 변환합니다.

    Args:
        key: get_wch() 결과 (문자는 str, 특수 키는 int)
        prompting: 검색어 입력 중인지 여부

    Returns:
        Event: 변환된 이벤트
    """
    if key == curses.KEY_RESIZE:
        return Event(EventType.RESIZE)

    if prompting:
        if key in ENTER_KEYS:
            return Event(EventType.PROMPT_SUBMIT)
        if key == ESCAPE:
            return Event(EventType.PROMPT_CANCEL)
        if key in BACKSPACE_KEYS:
            return Event(EventType.PROMPT_BACKSPACE)
        if isinstance(key, str) and key.isprintable():
            return Event(EventType.PROMPT_INPUT, key)
        return Event(EventType.OTHER)

    mapping = {
        curses.KEY_LEFT: Event(EventType.SELECT_MENU_ITEM, Direction.LEFT),
        curses.KEY_RIGHT: Event(EventType.SELECT_MENU_ITEM, Direction.RIGHT),
        curses.KEY_UP: Event(EventType.SCROLL, 1),
        curses.KEY_DOWN: Event(EventType.SCROLL, -1),
        MOUSE_WHEEL_UP: Event(EventType.SCROLL, 3),
        MOUSE_WHEEL_DOWN: Event(EventType.SCROLL, -3),
        curses.KEY_PPAGE: Event(EventType.PAGE_UP),
        curses.KEY_NPAGE: Event(EventType.PAGE_DOWN),
        curses.KEY_HOME: Event(EventType.SCROLL_TOP),
        curses.KEY_END: Event(EventType.SCROLL_BOTTOM),
        "/": Event(EventType.START_SEARCH),
        "n": Event(EventType.NEXT_MATCH),
        "N": Event(EventType.PREVIOUS_MATCH),
        ESCAPE: Event(EventType.CLEAR_SEARCH),
        "q": Event(EventType.QUIT),
    }
    return mapping.get(key, Event(EventType.OTHER))


class Ui:
    """
    curses 화면 클래스

    화면 아래 한 줄은 필터 메뉴(또는 검색어 입력창)로, 나머지는 로그 내용으로 사용합니다.
    """

    def __init__(self, stdscr, colors: Optional[ColorPairs] = None):
        """
        Ui 초기화 (curses.wrapper 안에서 호출)

        Args:
            stdscr: curses 기본 화면
            colors: 색상 쌍 관리자 (기본값: 새 ColorPairs)
        """
        self.stdscr = stdscr
        self.colors = colors or ColorPairs()
        self._setup()

    def _setup(self) -> None:
        curses.cbreak()
        curses.noecho()
        try:
            curses.curs_set(0)
        except curses.error:
            logger.debug("커서 숨기기 미지원 터미널")
        curses.halfdelay(INPUT_TIMEOUT_TENTHS)
        self.stdscr.keypad(True)

        wheel_mask = getattr(curses, "BUTTON4_PRESSED", 0) | getattr(
            curses, "BUTTON5_PRESSED", 0
        )
        if wheel_mask:
            curses.mousemask(wheel_mask)
            curses.mouseinterval(0)

        self.colors.setup()

    def size(self) -> Tuple[int, int]:
        """(너비, 높이)"""
        height, width = self.stdscr.getmaxyx()
        return width, height

    def read_key(self) -> Optional[Key]:
        """
        키 입력 하나를 읽습니다. 입력 대기 시간이 지나면 None.

        마우스 휠 입력은 MOUSE_WHEEL_UP / MOUSE_WHEEL_DOWN으로 변환합니다.
        """
        try:
            key = self.stdscr.get_wch()
        except curses.error:
            return None

        if key == curses.KEY_MOUSE:
            return self._read_mouse_event()
        return key

    def _read_mouse_event(self) -> Optional[Key]:
        try:
            _, _, _, _, state = curses.getmouse()
        except curses.error:
            return None

        if state & getattr(curses, "BUTTON4_PRESSED", 0):
            return MOUSE_WHEEL_UP
        if state & getattr(curses, "BUTTON5_PRESSED", 0):
            return MOUSE_WHEEL_DOWN
        return None

    def render(self, session: FlowSession, prompt: Optional[str] = None) -> None:
        """
        세션 상태를 화면에 그립니다.

        Args:
            session: 세션 상태
            prompt: 입력 중인 검색어 (입력 중이 아니면 None)
        """
        self.stdscr.erase()

        for screen_row, row in enumerate(session.visible_rows()):
            self._render_row(session, screen_row, row)

        self._render_menu(session, prompt)
        self.stdscr.refresh()

    def _render_row(self, session: FlowSession, screen_row: int, row: VisibleRow) -> None:
        ranges = ()
        if session.search_query and row.entry.found_offsets:
            current_index = None
            matched = session.current_match
            if matched is not None and session.rendered[matched.line] is row.entry:
                current_index = matched.match_index
            ranges = match_ranges(
                row.entry.found_offsets, len(session.search_query), current_index
            )

        column = 0
        for span in row_spans(row.entry.line.segments, row.start, row.end, ranges):
            attrs = self.colors.attributes(span.style, span.highlight)
            self._addstr(screen_row, column, span.text, attrs)
            column += text_width(span.text)

    def _render_menu(self, session: FlowSession, prompt: Optional[str]) -> None:
        width, height = self.size()
        menu_row = height - 1

        self._addstr(menu_row, 0, " " * (width - 1), self.colors.menu(False))

        if prompt is not None:
            self._addstr(menu_row, 0, f"/{prompt}", self.colors.menu(True))
            return

        status = f" {len(session.rendered)}/{len(session.buffer)} "
        match_status = session.match_status()
        if match_status is not None:
            status = f" [{session.search_query}] {match_status}" + status

        status_width = text_width(status)
        menu_width = max(0, width - status_width - 1)
        for column, label, selected in menu_layout(
            session.filter_names(), session.active_index, menu_width
        ):
            self._addstr(menu_row, column, label, self.colors.menu(selected))

        if status_width < width:
            self._addstr(menu_row, width - status_width - 1, status, self.colors.menu(False))

    def _addstr(self, row: int, column: int, text: str, attrs: int) -> None:
        width, height = self.size()
        # 오른쪽 아래 모서리에 쓰면 curses.error가 발생하므로 마지막 행의 마지막 열은 비워 둠
        limit = width - column - (1 if row == height - 1 else 0)
        text = clip_width(text, limit)
        if not text:
            return
        try:
            self.stdscr.addstr(row, column, text, attrs)
        except curses.error:
            pass


def setup_locale() -> None:
    """curses 초기화 전에 호출하여 유니코드 출력을 활성화합니다."""
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error as e:
        logger.warning(f"로케일 설정 실패: {e}")
