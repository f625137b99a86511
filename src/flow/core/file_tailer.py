"""
File Tailer 모듈

tail -f 와 같이 입력 파일의 끝을 따라가며 새로 추가된 줄을 읽습니다.
파일 잘림(truncate)과 로테이션(inode 변경)을 감지하여 처음부터 다시 읽습니다.
"""

import logging
import os
from pathlib import Path
from collections import deque
from typing import BinaryIO, Deque, List, Optional, Union

logger = logging.getLogger(__name__)

ENCODING = "utf-8"


class TailError(Exception):
    """입력 파일 추적 관련 오류"""

    pass


class FileTailer:
    """
    입력 파일 추적 클래스

    주요 기능:
    1. 파일 끝에서부터 역방향 블록 읽기로 마지막 N줄 로드
    2. 새로 완성된 줄만 반환하는 poll() (줄바꿈이 오기 전의 조각은 보관)
    3. 잘림/로테이션/일시적 삭제 처리
    """

    BLOCK_SIZE = 8192

    def __init__(self, path: Union[str, Path], max_lines: Optional[int] = None):
        """
        FileTailer 초기화

        Args:
            path: 추적할 파일 경로
            max_lines: poll() 한 번에 반환할 최대 줄 수 (None이면 제한 없음)

        Raises:
            TailError: 파일이 없거나 일반 파일이 아닐 때
        """
        self.path = Path(path).expanduser()
        self.max_lines = max_lines
        if not self.path.exists():
            raise TailError(f"입력 파일을 찾을 수 없습니다: {self.path}")
        if self.path.is_dir():
            raise TailError(f"입력 경로가 디렉터리입니다: {self.path}")

        self._file: Optional[BinaryIO] = None
        self._inode: Optional[int] = None
        self._position = 0
        self._pending = b""
        self._open()

    def _open(self) -> bool:
        """파일을 열고 inode를 기록합니다. 파일이 없으면 False."""
        try:
            self._file = open(self.path, "rb")
        except FileNotFoundError:
            self._file = None
            return False
        except OSError as e:
            raise TailError(f"입력 파일을 열 수 없습니다: {self.path} - {e}")

        self._inode = os.fstat(self._file.fileno()).st_ino
        self._position = 0
        self._pending = b""
        return True

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "FileTailer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def position(self) -> int:
        """다음에 읽을 바이트 오프셋"""
        return self._position

    def read_last(self, count: int) -> List[str]:
        """
        파일의 마지막 count개 줄을 읽고, 읽기 위치를 파일 끝으로 옮깁니다.

        Args:
            count: 읽을 줄 수

        Returns:
            List[str]: 오래된 순서의 줄 목록 (줄바꿈 제외)
        """
        if self._file is None:
            return []

        self._file.seek(0, os.SEEK_END)
        end = self._file.tell()

        # 마지막 줄이 줄바꿈으로 끝나지 않으면 미완성 조각으로 보관
        complete_end = self._last_newline_end(end)
        self._pending = b""
        if complete_end < end:
            self._file.seek(complete_end)
            self._pending = self._file.read(end - complete_end)
        self._position = end

        if count <= 0 or complete_end == 0:
            return []

        data = b""
        offset = complete_end
        # count개의 줄을 구분하려면 줄바꿈 count+1개(마지막 줄바꿈 포함)가 필요
        while offset > 0 and data.count(b"\n") <= count:
            read_size = min(self.BLOCK_SIZE, offset)
            offset -= read_size
            self._file.seek(offset)
            data = self._file.read(read_size) + data

        lines = data.split(b"\n")[:-1]
        if offset > 0:
            # 첫 조각은 잘린 줄일 수 있음
            lines = lines[1:]
        return [self._decode(line) for line in lines[-count:]]

    def _last_newline_end(self, end: int) -> int:
        """파일에서 마지막 줄바꿈 직후의 오프셋 (줄바꿈이 없으면 0)"""
        offset = end
        while offset > 0:
            read_size = min(self.BLOCK_SIZE, offset)
            offset -= read_size
            self._file.seek(offset)
            block = self._file.read(read_size)
            index = block.rfind(b"\n")
            if index != -1:
                return offset + index + 1
        return 0

    def poll(self) -> List[str]:
        """
        마지막 호출 이후 새로 완성된 줄을 반환합니다.

        Returns:
            List[str]: 새 줄 목록 (없으면 빈 리스트)
        """
        self._check_rotation()
        if self._file is None:
            return []

        try:
            size = os.fstat(self._file.fileno()).st_size
        except OSError as e:
            logger.warning(f"입력 파일 상태 확인 실패: {e}")
            return []

        if size < self._position:
            logger.info(f"입력 파일이 잘렸습니다. 처음부터 다시 읽습니다: {self.path}")
            self._position = 0
            self._pending = b""

        if size == self._position:
            return []

        # 로테이션 직후처럼 새 영역이 크면 블록 단위로 읽고 마지막 max_lines줄만 남김
        lines: Deque[bytes] = deque(maxlen=self.max_lines)
        received = 0
        self._file.seek(self._position)
        while self._position < size:
            data = self._file.read(min(self.BLOCK_SIZE, size - self._position))
            if not data:
                break
            self._position += len(data)
            chunk = self._split(data)
            received += len(chunk)
            lines.extend(chunk)

        if received > len(lines):
            logger.debug(f"새 줄 {received}개 중 마지막 {len(lines)}개만 사용합니다")
        return [self._decode(line) for line in lines]

    def _check_rotation(self) -> None:
        """경로의 파일이 바뀌었거나 사라졌는지 확인합니다."""
        try:
            inode = os.stat(self.path).st_ino
        except FileNotFoundError:
            if self._file is not None:
                logger.info(f"입력 파일이 사라졌습니다. 다시 생성되기를 기다립니다: {self.path}")
                self.close()
            return

        if self._file is None:
            if self._open():
                logger.info(f"입력 파일을 다시 열었습니다: {self.path}")
            return

        if inode != self._inode:
            logger.info(f"입력 파일 로테이션 감지: {self.path}")
            # 이전 파일에 남아 있는 데이터는 버림
            self.close()
            self._open()

    def _split(self, data: bytes) -> List[bytes]:
        chunks = (self._pending + data).split(b"\n")
        self._pending = chunks.pop()
        return chunks

    @staticmethod
    def _decode(data: bytes) -> str:
        return data.decode(ENCODING, errors="replace").rstrip("\r")
