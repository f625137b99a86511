"""
Search 모듈

화면 너비에 맞춰 줄바꿈된 줄(RenderedLine)의 높이와 검색 매칭 위치를 관리합니다.

스크롤 위치는 화면 아래쪽 기준 역방향 인덱스(reverse index)로 표현합니다.
reverse_index가 0이면 가장 마지막 행이 화면 맨 아래에 보이는 상태(따라가기)입니다.
"""

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional

from flow.models.line import Line


@dataclass
class Viewport:
    """
    화면에 보이는 영역

    Attributes:
        reverse_index: 화면 아래에서 가려진 행 수
        height: 화면에 보이는 행 수
    """

    reverse_index: int
    height: int

    def limit(self) -> int:
        return self.reverse_index + self.height

    def contains(self, reverse_row: int) -> bool:
        """아래에서부터 1로 시작하는 행 번호가 화면 안에 있는지 여부"""
        return self.reverse_index < reverse_row <= self.limit()


@dataclass(frozen=True)
class MatchedLine:
    """검색 결과 위치 (줄 인덱스, 줄 안에서의 매칭 순번)"""

    line: int
    match_index: int


@dataclass
class RenderedLine:
    """
    화면 너비에 맞춰 배치된 줄

    Attributes:
        line: 원본 줄
        height: 줄바꿈 후 차지하는 행 수
        found_matches: 각 매칭이 위치한 줄 안의 행 번호 (매칭이 없으면 None)
        found_offsets: 각 매칭의 문자 오프셋 (found_matches와 같은 순서)
        row_starts: 각 행이 시작하는 문자 오프셋 (비어 있으면 한 칸짜리 문자로 가정)
    """

    line: Line
    height: int
    found_matches: Optional[List[int]] = None
    found_offsets: List[int] = field(default_factory=list)
    row_starts: List[int] = field(default_factory=list)

    def row_start(self, row: int, width: int) -> int:
        """row번째 행의 시작 문자 오프셋 (마지막 행 다음이면 줄 길이)"""
        if not self.row_starts:
            return row * max(1, width)
        if row < len(self.row_starts):
            return self.row_starts[row]
        return len(self.line.text)

    def row_of(self, offset: int, width: int) -> int:
        """문자 오프셋이 위치한 행 번호"""
        if not self.row_starts:
            return offset // max(1, width)
        return bisect_right(self.row_starts, offset) - 1

    def search(self, text: str, width: int, ignore_case: bool = False) -> bool:
        """
        검색어 매칭 위치를 갱신합니다.

        Returns:
            bool: 매칭 여부
        """
        offsets = self.line.find_all(text, ignore_case) if text else []
        self.found_offsets = offsets
        if offsets:
            self.found_matches = [self.row_of(offset, width) for offset in offsets]
            return True

        self.found_matches = None
        return False

    def clear_matches(self) -> None:
        self.found_matches = None
        self.found_offsets = []

    def match_count(self) -> int:
        return len(self.found_matches) if self.found_matches else 0


class RenderedLineCollection:
    """
    RenderedLine 목록과 높이/검색 위치 계산

    모든 줄 인덱스는 오래된 줄(위쪽)에서 0부터 시작합니다.
    """

    def __init__(self, entries: Optional[List[RenderedLine]] = None):
        self.entries: List[RenderedLine] = entries if entries is not None else []

    @classmethod
    def build(
        cls,
        lines: Iterable[Line],
        width: int,
        query: Optional[str] = None,
        ignore_case: bool = False,
    ) -> "RenderedLineCollection":
        """
        줄 목록을 배치하고, 검색어가 있으면 매칭 위치도 계산합니다.

        Args:
            lines: 표시할 줄 목록
            width: 화면 너비
            query: 검색어 (선택적)
            ignore_case: 검색 시 대소문자 무시 여부

        Returns:
            RenderedLineCollection: 생성된 컬렉션
        """
        collection = cls()
        for line in lines:
            row_starts = line.wrap(width)
            collection.create(line, len(row_starts), row_starts=row_starts)
        if query:
            collection.search(query, width, ignore_case)
        return collection

    def create(
        self,
        line: Line,
        height: int,
        found_matches: Optional[List[int]] = None,
        row_starts: Optional[List[int]] = None,
    ) -> RenderedLine:
        entry = RenderedLine(line, height, found_matches, row_starts=row_starts or [])
        self.entries.append(entry)
        return entry

    def search(self, text: str, width: int, ignore_case: bool = False) -> int:
        """
        모든 줄의 매칭 위치를 갱신합니다.

        Returns:
            int: 전체 매칭 수
        """
        total = 0
        for entry in self.entries:
            if entry.search(text, width, ignore_case):
                total += entry.match_count()
        return total

    def clear_matches(self) -> None:
        for entry in self.entries:
            entry.clear_matches()

    def matching(self, text: str, ignore_case: bool = False) -> "RenderedLineCollection":
        """검색어를 포함하는 줄만 모은 새 컬렉션"""
        return RenderedLineCollection(
            [entry for entry in self.entries if entry.line.contains(text, ignore_case)]
        )

    def height(self) -> int:
        return sum(entry.height for entry in self.entries)

    def height_up_to_index(self, index: int) -> int:
        """index 이전 줄들의 높이 합"""
        return sum(entry.height for entry in self.entries[:index])

    def height_from_index(self, index: int) -> int:
        """index부터 마지막 줄까지의 높이 합"""
        return sum(entry.height for entry in self.entries[index:])

    def last_lines_height(self, count: int) -> int:
        if count <= 0:
            return 0
        return sum(entry.height for entry in self.entries[-count:])

    def total_matches(self) -> int:
        return sum(entry.match_count() for entry in self.entries)

    def buffer_reverse_index(self, line_index: int, match_index: int) -> int:
        """
        매칭이 위치한 행의 역방향 행 번호

        가장 아래 행이 1입니다.
        """
        entry = self.entries[line_index]
        offset = entry.found_matches[match_index]
        return self.height_from_index(line_index) - offset

    def is_match_in_viewport(self, matched_line: MatchedLine, viewport: Viewport) -> bool:
        reverse_row = self.buffer_reverse_index(
            matched_line.line, matched_line.match_index
        )
        return viewport.contains(reverse_row)

    def viewport_match(self, viewport: Viewport) -> Optional[MatchedLine]:
        """
        화면 안에 보이는 매칭 중 가장 아래쪽 매칭을 찾습니다.

        Args:
            viewport: 현재 화면 영역

        Returns:
            Optional[MatchedLine]: 매칭 위치 (없으면 None)
        """
        accumulated_height = 0
        limit = viewport.limit()

        for index in range(len(self.entries) - 1, -1, -1):
            entry = self.entries[index]
            accumulated_height += entry.height

            if entry.found_matches:
                for match_index in range(len(entry.found_matches) - 1, -1, -1):
                    reverse_row = accumulated_height - entry.found_matches[match_index]
                    if viewport.contains(reverse_row):
                        return MatchedLine(index, match_index)

            if accumulated_height >= limit:
                break

        return None

    def first_match(self) -> Optional[MatchedLine]:
        for index, entry in enumerate(self.entries):
            if entry.found_matches:
                return MatchedLine(index, 0)
        return None

    def last_match(self) -> Optional[MatchedLine]:
        for index in range(len(self.entries) - 1, -1, -1):
            entry = self.entries[index]
            if entry.found_matches:
                return MatchedLine(index, entry.match_count() - 1)
        return None

    def next_match(self, current: MatchedLine) -> Optional[MatchedLine]:
        """current 다음(아래쪽) 매칭. 없으면 None."""
        if current.line < len(self.entries):
            entry = self.entries[current.line]
            if current.match_index + 1 < entry.match_count():
                return MatchedLine(current.line, current.match_index + 1)

        for index in range(current.line + 1, len(self.entries)):
            if self.entries[index].found_matches:
                return MatchedLine(index, 0)
        return None

    def previous_match(self, current: MatchedLine) -> Optional[MatchedLine]:
        """current 이전(위쪽) 매칭. 없으면 None."""
        if current.line < len(self.entries) and current.match_index > 0:
            return MatchedLine(current.line, current.match_index - 1)

        for index in range(min(current.line, len(self.entries)) - 1, -1, -1):
            entry = self.entries[index]
            if entry.found_matches:
                return MatchedLine(index, entry.match_count() - 1)
        return None

    def match_ordinal(self, matched_line: MatchedLine) -> int:
        """매칭의 1부터 시작하는 순번"""
        ordinal = sum(entry.match_count() for entry in self.entries[: matched_line.line])
        return ordinal + matched_line.match_index + 1

    def index_of(self, line: Line) -> Optional[int]:
        """같은 Line 객체의 인덱스 (동일성 비교)"""
        for index in range(len(self.entries) - 1, -1, -1):
            if self.entries[index].line is line:
                return index
        return None

    def clear(self) -> None:
        self.entries.clear()

    def is_empty(self) -> bool:
        return not self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[RenderedLine]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> RenderedLine:
        return self.entries[index]
