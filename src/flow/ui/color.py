"""
Color 모듈

ANSI 스타일을 curses 색상 쌍(color pair)과 속성으로 변환합니다.
색상 쌍은 처음 사용될 때 생성합니다.
"""

import curses
import logging
from typing import Dict, Optional, Tuple

from flow.models.line import Style
from flow.ui.renderer import Highlight

logger = logging.getLogger(__name__)

# 예약된 색상 쌍
MENU_PAIR = 1
MENU_SELECTED_PAIR = 2
CURRENT_MATCH_PAIR = 3
FIRST_DYNAMIC_PAIR = 4

DEFAULT_COLOR = -1


class ColorPairs:
    """
    색상 쌍 관리 클래스

    (전경색, 배경색) 조합마다 하나의 색상 쌍을 생성하고 재사용합니다.
    터미널의 색상 쌍이 부족하면 기본 색상 쌍(0)을 사용합니다.
    """

    def __init__(self, screen_module=curses):
        """
        ColorPairs 초기화

        Args:
            screen_module: curses 모듈 (테스트에서 대체 가능)
        """
        self._curses = screen_module
        self._pairs: Dict[Tuple[int, int], int] = {}
        self._next_pair = FIRST_DYNAMIC_PAIR
        self.enabled = False

    def setup(self) -> None:
        """기본 색상 쌍을 초기화합니다. initscr 이후에 호출해야 합니다."""
        if not self._curses.has_colors():
            logger.info("터미널이 색상을 지원하지 않습니다")
            return

        self._curses.start_color()
        try:
            self._curses.use_default_colors()
        except self._curses.error:
            logger.debug("use_default_colors 미지원 터미널")

        self._curses.init_pair(MENU_PAIR, self._curses.COLOR_WHITE, self._curses.COLOR_BLUE)
        self._curses.init_pair(
            MENU_SELECTED_PAIR, self._curses.COLOR_WHITE, self._curses.COLOR_GREEN
        )
        self._curses.init_pair(
            CURRENT_MATCH_PAIR, self._curses.COLOR_BLACK, self._curses.COLOR_YELLOW
        )
        self.enabled = True

    def pair_number(self, fg: Optional[int], bg: Optional[int]) -> int:
        """
        (전경색, 배경색)에 해당하는 색상 쌍 번호

        Args:
            fg: 전경색 (None이면 기본색)
            bg: 배경색 (None이면 기본색)

        Returns:
            int: 색상 쌍 번호 (0은 터미널 기본)
        """
        if not self.enabled or (fg is None and bg is None):
            return 0

        key = (self._normalize(fg), self._normalize(bg))
        if key in self._pairs:
            return self._pairs[key]

        if self._next_pair >= self._curses.COLOR_PAIRS:
            return 0

        pair = self._next_pair
        try:
            self._curses.init_pair(pair, key[0], key[1])
        except self._curses.error as e:
            logger.debug(f"색상 쌍 생성 실패 {key}: {e}")
            return 0

        self._pairs[key] = pair
        self._next_pair += 1
        return pair

    def _normalize(self, color: Optional[int]) -> int:
        if color is None:
            return DEFAULT_COLOR
        colors = self._curses.COLORS
        # 256색을 지원하지 않는 터미널에서는 기본 8색으로 축소
        return color if color < colors else color % 8

    def attributes(self, style: Style, highlight: Highlight = Highlight.NONE) -> int:
        """
        스타일과 검색 강조에 해당하는 curses 속성값

        Args:
            style: 텍스트 스타일
            highlight: 검색 강조 종류

        Returns:
            int: curses 속성값
        """
        if highlight == Highlight.CURRENT_MATCH and self.enabled:
            return self._curses.color_pair(CURRENT_MATCH_PAIR) | self._curses.A_BOLD

        attrs = self._curses.color_pair(self.pair_number(style.fg, style.bg))
        if style.bold:
            attrs |= self._curses.A_BOLD
        if style.dim:
            attrs |= self._curses.A_DIM
        if style.underline:
            attrs |= self._curses.A_UNDERLINE
        if style.reverse != (highlight != Highlight.NONE):
            attrs |= self._curses.A_REVERSE
        return attrs

    def menu(self, selected: bool) -> int:
        if not self.enabled:
            return self._curses.A_REVERSE | (self._curses.A_BOLD if selected else 0)
        return self._curses.color_pair(MENU_SELECTED_PAIR if selected else MENU_PAIR)
