"""
Renderer 모듈

화면의 한 행에 그릴 텍스트 구간을 계산합니다. curses에 의존하지 않습니다.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from flow.models.line import Segment, Style, text_width


class Highlight(Enum):
    NONE = 0
    MATCH = 1
    CURRENT_MATCH = 2


@dataclass(frozen=True)
class Span:
    """화면에 그릴 구간"""

    text: str
    style: Style
    highlight: Highlight = Highlight.NONE


def match_ranges(
    offsets: Sequence[int], length: int, current_index: Optional[int] = None
) -> List[Tuple[int, int, Highlight]]:
    """
    매칭 오프셋을 (시작, 끝, 강조 종류) 범위 목록으로 변환

    Args:
        offsets: 매칭 시작 오프셋 목록
        length: 검색어 길이
        current_index: 현재 선택된 매칭 순번 (없으면 None)
    """
    ranges = []
    for index, offset in enumerate(offsets):
        kind = Highlight.CURRENT_MATCH if index == current_index else Highlight.MATCH
        ranges.append((offset, offset + length, kind))
    return ranges


def row_spans(
    segments: Sequence[Segment],
    start: int,
    end: int,
    ranges: Sequence[Tuple[int, int, Highlight]] = (),
) -> List[Span]:
    """
    줄의 [start, end) 문자 구간을 스타일/강조별 Span 목록으로 자릅니다.

    Args:
        segments: 줄의 스타일 구간
        start: 행의 시작 문자 오프셋
        end: 행의 끝 문자 오프셋 (포함하지 않음)
        ranges: 검색 강조 범위 목록

    Returns:
        List[Span]: 행에 그릴 구간 목록
    """
    # 스타일 경계와 강조 경계를 모두 모아 구간을 나눔
    boundaries = {start, end}
    position = 0
    for segment in segments:
        position += len(segment.text)
        if start < position < end:
            boundaries.add(position)
    for range_start, range_end, _ in ranges:
        for boundary in (range_start, range_end):
            if start < boundary < end:
                boundaries.add(boundary)

    cuts = sorted(boundaries)
    spans: List[Span] = []
    for piece_start, piece_end in zip(cuts, cuts[1:]):
        segment, text = _text_at(segments, piece_start, piece_end)
        if not text:
            continue
        spans.append(Span(text, segment.style, _highlight_at(ranges, piece_start)))
    return spans


def _text_at(segments: Sequence[Segment], start: int, end: int) -> Tuple[Segment, str]:
    position = 0
    for segment in segments:
        segment_end = position + len(segment.text)
        if position <= start < segment_end:
            return segment, segment.text[start - position : end - position]
        position = segment_end
    return Segment(""), ""


def _highlight_at(ranges: Sequence[Tuple[int, int, Highlight]], offset: int) -> Highlight:
    result = Highlight.NONE
    for range_start, range_end, kind in ranges:
        if range_start <= offset < range_end:
            if kind == Highlight.CURRENT_MATCH:
                return kind
            result = kind
    return result


def menu_layout(names: Sequence[str], active_index: int, width: int) -> List[Tuple[int, str, bool]]:
    """
    메뉴 항목의 (열 위치, 표시 문자열, 선택 여부) 목록

    화면 너비를 넘는 항목은 생략하되, 선택된 항목이 보이도록 시작 항목을 옮깁니다.
    """
    labels = [f" {name} " for name in names]

    first = 0
    while first < active_index and sum(text_width(label) for label in labels[first : active_index + 1]) > width:
        first += 1

    items = []
    column = 0
    for index in range(first, len(labels)):
        label = labels[index]
        label_width = text_width(label)
        if column + label_width > width:
            break
        items.append((column, label, index == active_index))
        column += label_width
    return items
