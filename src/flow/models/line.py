"""
Line 데이터 모델

입력 파일에서 읽은 한 줄과, ANSI 색상 코드를 해석한 스타일 구간(Segment)을 나타내는 데이터 모델입니다.
"""

import unicodedata
from dataclasses import dataclass, field
from typing import List, Optional

TAB_REPLACEMENT = "    "


def char_width(char: str) -> int:
    """문자가 터미널에서 차지하는 칸 수 (한글 등 전각 문자는 2칸)"""
    if unicodedata.east_asian_width(char) in ("W", "F"):
        return 2
    return 1


def text_width(text: str) -> int:
    """문자열이 터미널에서 차지하는 칸 수"""
    if text.isascii():
        return len(text)
    return sum(char_width(char) for char in text)


def clip_width(text: str, width: int) -> str:
    """터미널에서 width칸 안에 들어가는 앞부분"""
    if text.isascii():
        return text[: max(0, width)]
    used = 0
    for index, char in enumerate(text):
        used += char_width(char)
        if used > width:
            return text[:index]
    return text


@dataclass(frozen=True)
class Style:
    """
    텍스트 구간의 표시 스타일

    Attributes:
        fg: 전경색 번호 (0-255, None이면 터미널 기본색)
        bg: 배경색 번호 (0-255, None이면 터미널 기본색)
        bold: 굵게
        dim: 흐리게
        underline: 밑줄
        reverse: 반전
    """

    fg: Optional[int] = None
    bg: Optional[int] = None
    bold: bool = False
    dim: bool = False
    underline: bool = False
    reverse: bool = False


PLAIN_STYLE = Style()


@dataclass(frozen=True)
class Segment:
    """동일한 스타일이 적용된 텍스트 구간"""

    text: str
    style: Style = PLAIN_STYLE


@dataclass
class Line:
    """
    로그 한 줄

    Attributes:
        raw: 입력에서 읽은 원본 문자열 (줄바꿈 제거)
        text: ANSI 코드를 제거한 표시용 문자열
        segments: 스타일별 텍스트 구간 목록 (이어 붙이면 text와 같음)
    """

    raw: str
    text: str
    segments: List[Segment] = field(default_factory=list)

    @classmethod
    def parse(cls, raw: str) -> "Line":
        """
        원본 문자열로부터 Line 객체 생성

        Args:
            raw: 입력에서 읽은 문자열 (끝의 줄바꿈 문자는 제거됨)

        Returns:
            Line: 생성된 Line 객체
        """
        # 순환 import 방지
        from flow.core.ansi_parser import parse_ansi

        raw = raw.rstrip("\r\n")
        segments = [
            Segment(segment.text.replace("\t", TAB_REPLACEMENT), segment.style)
            for segment in parse_ansi(raw)
        ]
        text = "".join(segment.text for segment in segments)
        return cls(raw=raw, text=text, segments=segments)

    def contains(self, query: str, ignore_case: bool = False) -> bool:
        """
        표시용 문자열에 검색어가 포함되어 있는지 확인

        Args:
            query: 검색어
            ignore_case: 대소문자 무시 여부

        Returns:
            bool: 포함 여부
        """
        if not query:
            return False
        if ignore_case:
            return query.lower() in self.text.lower()
        return query in self.text

    def find_all(self, query: str, ignore_case: bool = False) -> List[int]:
        """
        검색어가 나타나는 모든 위치(겹치지 않음)를 반환

        Args:
            query: 검색어
            ignore_case: 대소문자 무시 여부

        Returns:
            List[int]: 표시용 문자열 기준 시작 오프셋 목록
        """
        if not query:
            return []

        haystack = self.text.lower() if ignore_case else self.text
        needle = query.lower() if ignore_case else query

        offsets = []
        start = haystack.find(needle)
        while start != -1:
            offsets.append(start)
            start = haystack.find(needle, start + len(needle))
        return offsets

    def wrap(self, width: int) -> List[int]:
        """
        주어진 화면 너비에서 줄바꿈했을 때 각 행이 시작하는 문자 오프셋

        전각 문자는 2칸으로 계산하며, 행 끝에 1칸만 남으면 다음 행으로 넘깁니다.

        Args:
            width: 화면 너비 (칸 수)

        Returns:
            List[int]: 행 시작 오프셋 목록 (항상 0으로 시작)
        """
        if width <= 0:
            return [0]
        if self.text.isascii():
            return list(range(0, len(self.text), width)) or [0]

        starts = [0]
        column = 0
        for index, char in enumerate(self.text):
            cells = char_width(char)
            if column > 0 and column + cells > width:
                starts.append(index)
                column = 0
            column += cells
        return starts

    def height(self, width: int) -> int:
        """주어진 화면 너비에서 줄바꿈했을 때 차지하는 행 수"""
        return len(self.wrap(width))

    def __len__(self) -> int:
        return len(self.text)
