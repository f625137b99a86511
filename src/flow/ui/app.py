"""
Flow App 모듈

입력 파일 추적, 세션 상태 갱신, 화면 그리기를 반복하는 메인 루프입니다.
"""

import curses
import logging
from typing import Callable, Optional

from flow.config.settings import Settings
from flow.core.file_tailer import FileTailer
from flow.core.flow_session import FlowSession
from flow.ui.screen import Event, EventType, Ui, setup_locale, translate_key

logger = logging.getLogger(__name__)


class FlowApp:
    """
    flow 메인 루프 클래스

    주요 기능:
    1. 시작 시 마지막 N줄 로드
    2. 입력 대기 시간(100ms)마다 새 줄 확인
    3. 키 이벤트 처리 (필터 선택, 스크롤, 검색)
    """

    def __init__(self, session: FlowSession, tailer: FileTailer, settings: Settings):
        """
        FlowApp 초기화

        Args:
            session: 세션 상태
            tailer: 입력 파일 추적기
            settings: 실행 설정값
        """
        self.session = session
        self.tailer = tailer
        self.settings = settings
        # 검색어 입력 중이면 입력된 문자열, 아니면 None
        self.prompt: Optional[str] = None

    def run(self, wrapper: Callable = curses.wrapper) -> int:
        """
        curses 화면에서 메인 루프를 실행합니다.

        Returns:
            int: 종료 코드
        """
        setup_locale()
        try:
            wrapper(self._main)
        except KeyboardInterrupt:
            logger.info("Ctrl+C로 종료합니다")
        return 0

    def _main(self, stdscr) -> None:
        ui = Ui(stdscr)
        width, height = ui.size()
        self.session.resize(width, height)
        self.load_initial_lines()

        while True:
            self.poll_input()
            ui.render(self.session, self.prompt)

            key = ui.read_key()
            if key is None:
                continue

            event = translate_key(key, prompting=self.prompt is not None)
            if event.type == EventType.RESIZE:
                curses.update_lines_cols()
                width, height = ui.size()
                self.session.resize(width, height)
                continue

            if not self.handle_event(event):
                break

    def load_initial_lines(self) -> int:
        """파일의 마지막 N줄을 세션에 넣습니다."""
        lines = self.tailer.read_last(self.settings.lines)
        count = self.session.ingest(lines)
        logger.info(f"초기 로드: {count}줄 ({self.tailer.path})")
        return count

    def poll_input(self) -> int:
        """새로 추가된 줄을 세션에 넣습니다."""
        return self.session.ingest(self.tailer.poll())

    def handle_event(self, event: Event) -> bool:
        """
        이벤트를 처리합니다.

        Args:
            event: 키 이벤트

        Returns:
            bool: 계속 실행할지 여부 (False이면 종료)
        """
        session = self.session
        kind = event.type

        if kind == EventType.QUIT:
            return False
        elif kind == EventType.SELECT_MENU_ITEM:
            session.select_filter(event.value)
        elif kind == EventType.SCROLL:
            session.scroll(event.value)
        elif kind == EventType.PAGE_UP:
            session.page_up()
        elif kind == EventType.PAGE_DOWN:
            session.page_down()
        elif kind == EventType.SCROLL_TOP:
            session.scroll_to_top()
        elif kind == EventType.SCROLL_BOTTOM:
            session.scroll_to_bottom()
        elif kind == EventType.START_SEARCH:
            self.prompt = ""
        elif kind == EventType.NEXT_MATCH:
            session.next_match()
        elif kind == EventType.PREVIOUS_MATCH:
            session.previous_match()
        elif kind == EventType.CLEAR_SEARCH:
            session.clear_search()
        elif kind == EventType.PROMPT_INPUT:
            self.prompt = (self.prompt or "") + event.value
        elif kind == EventType.PROMPT_BACKSPACE:
            self.prompt = (self.prompt or "")[:-1]
        elif kind == EventType.PROMPT_SUBMIT:
            query = self.prompt or ""
            self.prompt = None
            session.search(query)
        elif kind == EventType.PROMPT_CANCEL:
            self.prompt = None

        return True
