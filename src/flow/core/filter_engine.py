"""
Filter Engine 모듈

설정 파일의 필터를 로그 줄 목록에 적용합니다.

필터에 start 조건이 있으면 여러 줄을 하나의 항목(entry)으로 묶어서 판단합니다.
예를 들어 타임스탬프로 시작하는 줄을 start로 지정하면, 뒤따르는 스택 트레이스 줄이
같은 항목에 포함되어 함께 표시됩니다.
"""

import logging
import re
from typing import Iterable, List, Optional, Pattern

from flow.config.config_manager import Condition, Filter
from flow.models.line import Line

logger = logging.getLogger(__name__)


class ConditionMatcher:
    """Condition 설정을 컴파일하여 줄 단위 매칭을 수행하는 클래스"""

    def __init__(self, condition: Condition):
        self.condition = condition
        self._ignore_case = condition.ignore_case
        self._contains = self._fold(condition.contains)
        self._starts_with = self._fold(condition.starts_with)
        self._ends_with = self._fold(condition.ends_with)

        self._regex: Optional[Pattern[str]] = None
        if condition.regex is not None:
            flags = re.IGNORECASE if self._ignore_case else 0
            self._regex = re.compile(condition.regex, flags)

    def _fold(self, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.lower() if self._ignore_case else value

    def matches(self, line: Line) -> bool:
        """
        줄이 조건을 모두 만족하는지 확인

        Args:
            line: 검사할 줄

        Returns:
            bool: 매칭 여부 (조건이 비어 있으면 항상 True)
        """
        text = line.text.lower() if self._ignore_case else line.text

        if self._contains is not None and self._contains not in text:
            return False
        if self._starts_with is not None and not text.startswith(self._starts_with):
            return False
        if self._ends_with is not None and not text.endswith(self._ends_with):
            return False
        if self._regex is not None and self._regex.search(line.text) is None:
            return False
        return True


class FilterMatcher:
    """
    필터를 적용하는 클래스

    주요 기능:
    1. 줄 단위 조건 매칭
    2. start/end 조건에 따른 여러 줄 항목 구성
    3. 항목 중 한 줄이라도 매칭되면 항목 전체를 표시
    """

    def __init__(self, filter_config: Filter):
        """
        FilterMatcher 초기화

        Args:
            filter_config: 설정 파일의 필터
        """
        self.filter = filter_config
        self.name = filter_config.name
        self._condition = ConditionMatcher(filter_config)
        self._start = (
            ConditionMatcher(filter_config.start) if filter_config.start else None
        )
        self._end = ConditionMatcher(filter_config.end) if filter_config.end else None

    @property
    def groups_entries(self) -> bool:
        """여러 줄 항목을 구성하는 필터인지 여부"""
        return self._start is not None

    def matches(self, line: Line) -> bool:
        return self._condition.matches(line)

    def is_start(self, line: Line) -> bool:
        return self._start is not None and self._start.matches(line)

    def is_end(self, line: Line) -> bool:
        return self._end is not None and self._end.matches(line)

    def group_entries(self, lines: Iterable[Line]) -> List[List[Line]]:
        """
        줄 목록을 항목 단위로 묶습니다.

        Args:
            lines: 오래된 순서의 줄 목록

        Returns:
            List[List[Line]]: 항목 목록 (각 항목은 한 줄 이상)
        """
        if not self.groups_entries:
            return [[line] for line in lines]

        entries: List[List[Line]] = []
        current: Optional[List[Line]] = None

        for line in lines:
            if self.is_start(line):
                current = [line]
                entries.append(current)
                # start와 end를 동시에 만족하면 한 줄짜리 항목
                if self.is_end(line):
                    current = None
            elif current is not None:
                current.append(line)
                if self.is_end(line):
                    current = None
            else:
                entries.append([line])

        return entries

    def apply(self, lines: Iterable[Line]) -> List[Line]:
        """
        필터를 적용하여 표시할 줄 목록을 반환합니다.

        Args:
            lines: 오래된 순서의 줄 목록

        Returns:
            List[Line]: 표시할 줄 목록 (입력 순서 유지)
        """
        if self._condition.condition.is_empty():
            return list(lines)

        result: List[Line] = []
        for entry in self.group_entries(lines):
            if any(self.matches(line) for line in entry):
                result.extend(entry)
        return result


def build_matchers(filters: Iterable[Filter]) -> List[FilterMatcher]:
    """설정의 필터 목록으로 FilterMatcher 목록 생성"""
    matchers = [FilterMatcher(item) for item in filters]
    logger.debug(f"필터 {len(matchers)}개 준비: {[m.name for m in matchers]}")
    return matchers
