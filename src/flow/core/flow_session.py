"""
Flow Session 모듈

화면(curses)과 분리된 flow의 상태를 관리합니다.
버퍼, 활성 필터, 스크롤 위치, 검색 상태를 보관하고 이벤트에 따라 갱신합니다.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from flow.config.config_manager import Configuration
from flow.core.filter_engine import FilterMatcher, build_matchers
from flow.core.line_buffer import LineBuffer
from flow.core.search import MatchedLine, RenderedLine, RenderedLineCollection, Viewport
from flow.models.line import Line

logger = logging.getLogger(__name__)

# 화면 맨 아래 행은 메뉴가 차지함
MENU_HEIGHT = 1


class Direction(Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass
class VisibleRow:
    """화면의 한 행 (어떤 줄의 몇 번째 행인지)"""

    entry: RenderedLine
    row: int
    width: int

    @property
    def start(self) -> int:
        return self.entry.row_start(self.row, self.width)

    @property
    def end(self) -> int:
        return self.entry.row_start(self.row + 1, self.width)


class FlowSession:
    """
    flow 세션 상태 클래스

    주요 기능:
    1. 입력 줄 수집 (최대 줄 수 제한)
    2. 필터 선택 및 필터링된 화면 구성
    3. 스크롤 (reverse offset 0 = 마지막 줄 따라가기)
    4. 검색 및 매칭 간 이동
    """

    def __init__(
        self,
        config: Configuration,
        max_lines: int,
        width: int = 80,
        height: int = 24,
    ):
        """
        FlowSession 초기화

        Args:
            config: 설정 객체
            max_lines: 메모리에 유지할 최대 줄 수
            width: 화면 너비
            height: 화면 높이 (메뉴 행 포함)
        """
        self.config = config
        self.buffer = LineBuffer(max_lines)
        self.matchers: List[FilterMatcher] = build_matchers(config.filters)
        self.active_index = 0
        self.width = max(1, width)
        self.height = max(MENU_HEIGHT + 1, height)
        self.reverse_offset = 0
        self.search_query: Optional[str] = None
        self.current_match: Optional[MatchedLine] = None
        self.rendered = RenderedLineCollection()

    # ------------------------------------------------------------------
    # 상태 조회
    # ------------------------------------------------------------------

    @property
    def active_filter(self) -> FilterMatcher:
        return self.matchers[self.active_index]

    @property
    def content_height(self) -> int:
        return self.height - MENU_HEIGHT

    @property
    def is_following(self) -> bool:
        return self.reverse_offset == 0

    @property
    def ignore_case(self) -> bool:
        return self.config.highlight_ignore_case

    def filter_names(self) -> List[str]:
        return [matcher.name for matcher in self.matchers]

    def viewport(self) -> Viewport:
        return Viewport(self.reverse_offset, self.content_height)

    def max_offset(self) -> int:
        return max(0, self.rendered.height() - self.content_height)

    def visible_rows(self) -> List[VisibleRow]:
        """
        화면에 표시할 행 목록을 위에서부터 반환합니다.

        내용이 화면보다 짧으면 맨 위부터 채웁니다.

        Returns:
            List[VisibleRow]: 표시할 행 목록
        """
        total = self.rendered.height()
        bottom = total - self.reverse_offset
        top = max(0, bottom - self.content_height)

        rows: List[VisibleRow] = []
        position = 0
        for entry in self.rendered:
            if position >= bottom:
                break
            if position + entry.height > top:
                for row in range(entry.height):
                    if top <= position + row < bottom:
                        rows.append(VisibleRow(entry, row, self.width))
            position += entry.height
        return rows

    def match_status(self) -> Optional[str]:
        """검색 상태 표시 문자열 (예: '3/10'). 검색 중이 아니면 None."""
        if not self.search_query:
            return None
        total = self.rendered.total_matches()
        if self.current_match is None or total == 0:
            return f"0/{total}"
        return f"{self.rendered.match_ordinal(self.current_match)}/{total}"

    # ------------------------------------------------------------------
    # 입력
    # ------------------------------------------------------------------

    def ingest(self, raw_lines: Iterable[str]) -> int:
        """
        새 줄을 버퍼에 넣고 화면을 갱신합니다.

        Args:
            raw_lines: 입력에서 읽은 줄 목록

        Returns:
            int: 추가된 줄 수
        """
        count = self.buffer.extend(Line.parse(raw) for raw in raw_lines)
        if count:
            self.refresh()
        return count

    def refresh(self) -> None:
        """
        활성 필터로 화면 내용을 다시 구성합니다.

        스크롤된 상태라면 화면 맨 위에 보이던 줄이 같은 위치에 남도록 offset을 조정합니다.
        """
        anchor = self._top_anchor() if not self.is_following else None
        match_anchor = self._match_anchor()

        self.rendered = RenderedLineCollection.build(
            self.active_filter.apply(self.buffer),
            self.width,
            self.search_query,
            self.ignore_case,
        )

        if anchor is not None:
            line, rows_below_top = anchor
            index = self.rendered.index_of(line)
            if index is not None:
                top_reverse = self.rendered.height_from_index(index)
                self.reverse_offset = top_reverse - rows_below_top

        self._clamp_offset()
        self._restore_current_match(match_anchor)

    def _top_anchor(self) -> Optional[Tuple[Line, int]]:
        """화면 맨 위 행의 (Line, 해당 줄 시작부터 화면 바닥까지의 행 수)"""
        rows = self.visible_rows()
        if not rows:
            return None
        first = rows[0]
        # 줄의 시작 행이 화면 위로 잘렸을 수 있으므로 줄 시작 기준으로 계산
        return first.entry.line, first.row + self.content_height

    # ------------------------------------------------------------------
    # 필터 / 스크롤
    # ------------------------------------------------------------------

    def select_filter(self, direction: Direction) -> FilterMatcher:
        """
        이전/다음 필터를 선택합니다. 양 끝에서는 반대쪽으로 넘어갑니다.

        Args:
            direction: 이동 방향

        Returns:
            FilterMatcher: 새로 선택된 필터
        """
        step = -1 if direction == Direction.LEFT else 1
        return self.select_filter_index((self.active_index + step) % len(self.matchers))

    def select_filter_index(self, index: int) -> FilterMatcher:
        if not 0 <= index < len(self.matchers):
            raise IndexError(f"필터 인덱스 범위를 벗어났습니다: {index}")

        self.active_index = index
        self.reverse_offset = 0
        self.current_match = None
        self.refresh()
        if self.search_query:
            self.current_match = self.rendered.last_match()
        logger.debug(f"필터 선택: {self.active_filter.name}")
        return self.active_filter

    def scroll(self, delta: int) -> None:
        """양수이면 위(과거)로, 음수이면 아래로 스크롤"""
        self.reverse_offset += delta
        self._clamp_offset()

    def page_up(self) -> None:
        self.scroll(max(1, self.content_height - 1))

    def page_down(self) -> None:
        self.scroll(-max(1, self.content_height - 1))

    def scroll_to_top(self) -> None:
        self.reverse_offset = self.max_offset()

    def scroll_to_bottom(self) -> None:
        self.reverse_offset = 0

    def resize(self, width: int, height: int) -> None:
        """화면 크기가 바뀌면 줄바꿈 높이를 다시 계산합니다."""
        self.width = max(1, width)
        self.height = max(MENU_HEIGHT + 1, height)
        self.refresh()
        if self.current_match is not None:
            self._ensure_visible(self.current_match)

    def _clamp_offset(self) -> None:
        self.reverse_offset = min(max(0, self.reverse_offset), self.max_offset())

    # ------------------------------------------------------------------
    # 검색
    # ------------------------------------------------------------------

    def search(self, query: str) -> int:
        """
        검색어를 설정하고 매칭 위치를 계산합니다.

        화면 안에 매칭이 있으면 그 매칭을, 없으면 마지막 매칭을 선택합니다.

        Args:
            query: 검색어 (빈 문자열이면 검색 해제)

        Returns:
            int: 전체 매칭 수
        """
        if not query:
            self.clear_search()
            return 0

        self.search_query = query
        total = self.rendered.search(query, self.width, self.ignore_case)
        logger.debug(f"검색: {query!r} ({total}건)")

        if total == 0:
            self.current_match = None
            return 0

        self.current_match = self.rendered.viewport_match(
            self.viewport()
        ) or self.rendered.last_match()
        self._ensure_visible(self.current_match)
        return total

    def clear_search(self) -> None:
        self.search_query = None
        self.current_match = None
        self.rendered.clear_matches()

    def next_match(self) -> Optional[MatchedLine]:
        """다음(아래쪽) 매칭으로 이동. 마지막 매칭에서는 첫 매칭으로 돌아갑니다."""
        if self.current_match is None:
            return self._select_match(self.rendered.first_match())
        found = self.rendered.next_match(self.current_match)
        return self._select_match(found or self.rendered.first_match())

    def previous_match(self) -> Optional[MatchedLine]:
        """이전(위쪽) 매칭으로 이동. 첫 매칭에서는 마지막 매칭으로 돌아갑니다."""
        if self.current_match is None:
            return self._select_match(self.rendered.last_match())
        found = self.rendered.previous_match(self.current_match)
        return self._select_match(found or self.rendered.last_match())

    def _select_match(self, matched: Optional[MatchedLine]) -> Optional[MatchedLine]:
        self.current_match = matched
        if matched is not None:
            self._ensure_visible(matched)
        return matched

    def _ensure_visible(self, matched: MatchedLine) -> None:
        """매칭 행이 화면 밖이면 화면 가운데로 스크롤합니다."""
        if self.rendered.is_match_in_viewport(matched, self.viewport()):
            return
        reverse_row = self.rendered.buffer_reverse_index(
            matched.line, matched.match_index
        )
        self.reverse_offset = reverse_row - (self.content_height + 1) // 2
        self._clamp_offset()

    def _match_anchor(self) -> Optional[Tuple[Line, int]]:
        """선택된 매칭의 (Line, 줄 안의 매칭 순번)"""
        matched = self.current_match
        if matched is None or matched.line >= len(self.rendered):
            return None
        return self.rendered[matched.line].line, matched.match_index

    def _restore_current_match(self, anchor: Optional[Tuple[Line, int]]) -> None:
        """화면이 다시 구성된 뒤 선택된 매칭의 줄 인덱스를 다시 찾습니다."""
        if self.current_match is None:
            return

        if anchor is not None:
            line, match_index = anchor
            index = self.rendered.index_of(line)
            if index is not None and match_index < self.rendered[index].match_count():
                self.current_match = MatchedLine(index, match_index)
                return

        # 버퍼에서 밀려났거나 필터에서 빠진 경우
        self.current_match = self.rendered.last_match()
