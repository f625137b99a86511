"""
ANSI Parser 모듈

로그 줄에 포함된 ANSI 이스케이프 시퀀스를 해석하여 스타일 구간(Segment) 목록으로 변환합니다.
SGR(Select Graphic Rendition) 시퀀스만 스타일로 반영하고, 그 밖의 CSI/OSC 시퀀스는 제거합니다.
"""

import re
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from flow.models.line import PLAIN_STYLE, Segment, Style

# CSI: ESC [ 파라미터 중간바이트 최종바이트 / OSC: ESC ] ... (BEL 또는 ESC \)
ESCAPE_PATTERN = re.compile(
    r"\x1b\[(?P<params>[0-?]*)(?P<inter>[ -/]*)(?P<final>[@-~])"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b[@-Z\\-_]"
)


def parse_ansi(raw: str) -> List[Segment]:
    """
    ANSI 코드가 포함된 문자열을 스타일 구간 목록으로 변환

    Args:
        raw: 원본 문자열

    Returns:
        List[Segment]: 스타일 구간 목록 (빈 구간은 포함하지 않음)
    """
    segments: List[Segment] = []
    style = PLAIN_STYLE
    position = 0

    for match in ESCAPE_PATTERN.finditer(raw):
        _append_segment(segments, raw[position : match.start()], style)
        position = match.end()

        if match.group("final") == "m" and not match.group("inter"):
            style = apply_sgr(style, _parse_params(match.group("params")))

    _append_segment(segments, raw[position:], style)
    return segments


def strip_ansi(raw: str) -> str:
    """ANSI 이스케이프 시퀀스를 모두 제거한 문자열 반환"""
    return ESCAPE_PATTERN.sub("", raw)


def apply_sgr(style: Style, params: Sequence[int]) -> Style:
    """
    SGR 파라미터를 현재 스타일에 적용

    Args:
        style: 현재 스타일
        params: SGR 파라미터 목록 (빈 목록은 리셋)

    Returns:
        Style: 새 스타일
    """
    if not params:
        return PLAIN_STYLE

    index = 0
    while index < len(params):
        code = params[index]

        if code == 0:
            style = PLAIN_STYLE
        elif code == 1:
            style = replace(style, bold=True)
        elif code == 2:
            style = replace(style, dim=True)
        elif code == 4:
            style = replace(style, underline=True)
        elif code == 7:
            style = replace(style, reverse=True)
        elif code == 22:
            style = replace(style, bold=False, dim=False)
        elif code == 24:
            style = replace(style, underline=False)
        elif code == 27:
            style = replace(style, reverse=False)
        elif 30 <= code <= 37:
            style = replace(style, fg=code - 30)
        elif code == 39:
            style = replace(style, fg=None)
        elif 40 <= code <= 47:
            style = replace(style, bg=code - 40)
        elif code == 49:
            style = replace(style, bg=None)
        elif 90 <= code <= 97:
            # 밝은 색상은 기본 색상 + 굵게로 표시
            style = replace(style, fg=code - 90, bold=True)
        elif 100 <= code <= 107:
            style = replace(style, bg=code - 100)
        elif code in (38, 48):
            color, consumed = _parse_extended_color(params[index + 1 :])
            if color is not None:
                if code == 38:
                    style = replace(style, fg=color)
                else:
                    style = replace(style, bg=color)
            index += consumed
        # 그 밖의 코드(기울임, 깜빡임 등)는 무시

        index += 1

    return style


def _parse_extended_color(params: Sequence[int]) -> Tuple[Optional[int], int]:
    """
    38/48 확장 색상 파라미터 해석

    Returns:
        (색상 번호 또는 None, 소비한 파라미터 수)
    """
    if not params:
        return None, 0

    mode = params[0]
    if mode == 5 and len(params) >= 2:
        return params[1] if 0 <= params[1] <= 255 else None, 2
    if mode == 2:
        # truecolor는 curses 팔레트로 표현하지 않음
        return None, min(4, len(params))
    return None, 1


def _parse_params(params: str) -> List[int]:
    if not params:
        return []

    values = []
    for part in params.replace(":", ";").split(";"):
        try:
            values.append(int(part) if part else 0)
        except ValueError:
            continue
    return values


def _append_segment(segments: List[Segment], text: str, style: Style) -> None:
    if not text:
        return
    # 같은 스타일의 연속 구간은 병합
    if segments and segments[-1].style == style:
        segments[-1] = Segment(segments[-1].text + text, style)
    else:
        segments.append(Segment(text, style))
