"""
Line Buffer 모듈

메모리에 유지하는 로그 줄의 최대 개수를 제한하는 버퍼입니다.
"""

import logging
from collections import deque
from typing import Deque, Iterable, Iterator, List

from flow.models.line import Line

logger = logging.getLogger(__name__)


class LineBuffer:
    """
    최대 줄 수가 제한된 FIFO 버퍼

    용량을 넘으면 가장 오래된 줄부터 버립니다.
    """

    def __init__(self, max_lines: int):
        """
        LineBuffer 초기화

        Args:
            max_lines: 메모리에 유지할 최대 줄 수 (1 이상)
        """
        if max_lines < 1:
            raise ValueError(f"max_lines는 1 이상이어야 합니다: {max_lines}")

        self.max_lines = max_lines
        self._lines: Deque[Line] = deque(maxlen=max_lines)
        self.total_received = 0
        self.dropped = 0
        # 내용이 바뀔 때마다 증가
        self.generation = 0

    def push(self, line: Line) -> None:
        """줄 하나를 추가"""
        if len(self._lines) == self.max_lines:
            self.dropped += 1
        self._lines.append(line)
        self.total_received += 1
        self.generation += 1

    def extend(self, lines: Iterable[Line]) -> int:
        """
        여러 줄을 추가

        Returns:
            int: 추가된 줄 수
        """
        count = 0
        for line in lines:
            self.push(line)
            count += 1

        if count:
            logger.debug(
                f"{count}줄 추가 (버퍼: {len(self._lines)}/{self.max_lines}, 버림: {self.dropped})"
            )
        return count

    def last(self, count: int) -> List[Line]:
        """마지막 count개의 줄을 오래된 순서로 반환"""
        if count <= 0:
            return []
        return list(self._lines)[-count:]

    def clear(self) -> None:
        self._lines.clear()
        self.generation += 1

    def __iter__(self) -> Iterator[Line]:
        return iter(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __getitem__(self, index: int) -> Line:
        return self._lines[index]
