"""
Renderer 테스트
"""

from flow.models.line import PLAIN_STYLE, Line, Style
from flow.ui.renderer import Highlight, Span, match_ranges, menu_layout, row_spans


def test_match_ranges():
    assert match_ranges([0, 6], 5, current_index=1) == [
        (0, 5, Highlight.MATCH),
        (6, 11, Highlight.CURRENT_MATCH),
    ]


def test_row_spans_plain():
    line = Line.parse("hello world")

    assert row_spans(line.segments, 0, 5) == [Span("hello", PLAIN_STYLE)]
    assert row_spans(line.segments, 6, 11) == [Span("world", PLAIN_STYLE)]


def test_row_spans_keep_styles():
    line = Line.parse("\x1b[31mred\x1b[0m plain")

    assert row_spans(line.segments, 0, 20) == [
        Span("red", Style(fg=1)),
        Span(" plain", PLAIN_STYLE),
    ]


def test_row_spans_with_highlight():
    line = Line.parse("hello world")
    ranges = match_ranges([0, 6], 5, current_index=1)

    assert row_spans(line.segments, 0, 11, ranges) == [
        Span("hello", PLAIN_STYLE, Highlight.MATCH),
        Span(" ", PLAIN_STYLE),
        Span("world", PLAIN_STYLE, Highlight.CURRENT_MATCH),
    ]


def test_row_spans_highlight_across_wrap():
    line = Line.parse("abcdefgh")
    ranges = match_ranges([3], 3)

    assert row_spans(line.segments, 0, 4, ranges) == [
        Span("abc", PLAIN_STYLE),
        Span("d", PLAIN_STYLE, Highlight.MATCH),
    ]
    assert row_spans(line.segments, 4, 8, ranges) == [
        Span("ef", PLAIN_STYLE, Highlight.MATCH),
        Span("gh", PLAIN_STYLE),
    ]


def test_menu_layout_fits():
    assert menu_layout(["All", "Errors", "Warnings"], 1, 100) == [
        (0, " All ", False),
        (5, " Errors ", True),
        (13, " Warnings ", False),
    ]


def test_menu_layout_keeps_active_visible():
    """화면보다 메뉴가 길면 선택된 항목이 보이도록 앞 항목을 생략"""
    assert menu_layout(["All", "Errors", "Warnings"], 2, 12) == [
        (0, " Warnings ", True),
    ]


def test_menu_layout_truncates_tail():
    assert menu_layout(["All", "Errors", "Warnings"], 0, 15) == [
        (0, " All ", True),
        (5, " Errors ", False),
    ]


def test_menu_layout_wide_names():
    assert menu_layout(["전체", "에러"], 1, 100) == [
        (0, " 전체 ", False),
        (6, " 에러 ", True),
    ]
    assert menu_layout(["전체", "에러"], 0, 10) == [(0, " 전체 ", True)]
