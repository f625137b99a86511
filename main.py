"""
flow CLI 진입점

프로젝트 루트에서 실행:
  python main.py <input> [options]

또는 설치 후:
  flow <input> [options]
"""

import sys
from pathlib import Path

# src 디렉터리를 Python 경로에 추가
source_root = Path(__file__).parent / "src"
if str(source_root) not in sys.path:
    sys.path.insert(0, str(source_root))

from flow.__main__ import main  # noqa: E402


if __name__ == "__main__":
    main()
