"""
flow CLI 진입점

설치 후:
  flow <input> [options]

또는 프로젝트 루트에서 실행:
  python -m flow <input> [options]
"""

import sys

from flow.cli.cli_controller import CLIController
from flow.config.settings import load_env_file


def main():
    """CLI 메인 함수"""
    load_env_file()

    controller = CLIController()
    exit_code = controller.execute()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
