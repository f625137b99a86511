"""
CLI Controller 모듈

argparse를 사용하여 flow 명령줄 옵션을 파싱하고, 설정 파일 생성(--init) 또는 로그 추적 화면을 실행합니다.
"""

import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from flow import __version__
from flow.config.config_initializer import initialize_config
from flow.config.config_manager import (
    Configuration,
    ConfigurationError,
    default_config,
    load_config,
    resolve_config_path,
    set_config,
)
from flow.config.settings import ENV_LOG_DIR, Settings, resolve_settings
from flow.core.file_tailer import FileTailer, TailError
from flow.core.flow_session import FlowSession
from flow.ui.app import FlowApp

USAGE = """flow <input> [options]
       flow (--init=<path>)
       flow -h | --help
       flow -v | --version"""

DEFAULT_LOG_DIR = Path.home() / ".cache" / "flow" / "logs"


def non_negative_int(value: str) -> int:
    """0 이상의 정수 인자 변환"""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"정수가 아닙니다: {value}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"0 이상이어야 합니다: {value}")
    return number


def positive_int(value: str) -> int:
    """1 이상의 정수 인자 변환"""
    number = non_negative_int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"1 이상이어야 합니다: {value}")
    return number


class CLIController:
    """
    CLI 명령어를 파싱하고 실행하는 컨트롤러 클래스

    주요 기능:
    1. 옵션 파싱: <input>, --init, --config, --lines, --max, --help, --version
    2. 설정 파일 탐색: --config, 현재 디렉터리, 사용자 홈 순서
    3. 설정 파일 생성: --init
    4. 에러 처리: 설정/입력 파일 오류를 메시지와 종료 코드로 변환
    5. 로깅: 모든 작업을 로그 파일에 기록 (화면을 가리지 않도록 콘솔에는 경고 이상만 출력)
    """

    def __init__(self):
        """CLIController 초기화"""
        self.parser = self._create_parser()
        self._console_handler: Optional[logging.Handler] = None
        self.logger = self._setup_logging()
        self.config: Optional[Configuration] = None
        self.config_path: Optional[Path] = None

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        argparse 파서 생성

        Returns:
            argparse.ArgumentParser: 설정된 메인 파서
        """
        parser = argparse.ArgumentParser(
            prog="flow",
            usage=USAGE,
            description="Realtime log analyzer",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            add_help=False,
        )

        parser.add_argument("input", nargs="?", help=argparse.SUPPRESS)
        parser.add_argument("--init", metavar="<path>", help=argparse.SUPPRESS)
        parser.add_argument(
            "-c",
            "--config",
            metavar="<config>",
            help="path to config file; default: current directory, then user home",
        )
        parser.add_argument(
            "-n",
            "--lines",
            metavar="<lines>",
            type=non_negative_int,
            help="last N lines to output; default 10",
        )
        parser.add_argument(
            "-m",
            "--max",
            dest="max_lines",
            metavar="<max>",
            type=positive_int,
            help="max lines retained in memory; default 3000",
        )
        parser.add_argument("-h", "--help", action="help", help="show this help and exit")
        parser.add_argument(
            "-v",
            "--version",
            action="version",
            version=f"%(prog)s {__version__}",
            help="show version and exit",
        )

        return parser

    def _setup_logging(self) -> logging.Logger:
        """
        로깅 설정

        Returns:
            logging.Logger: 설정된 로거
        """
        logger = logging.getLogger("flow")
        logger.setLevel(logging.DEBUG)
        # 컨트롤러를 여러 번 만들어도 핸들러가 중복되지 않도록 정리
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        # 콘솔 핸들러
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_formatter = logging.Formatter("%(levelname)s - %(message)s")
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)
        self._console_handler = console_handler

        # 파일 핸들러 (로그 디렉터리를 만들 수 없으면 콘솔만 사용)
        log_dir = Path(os.getenv(ENV_LOG_DIR, str(DEFAULT_LOG_DIR))).expanduser()
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / f"flow_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            logger.warning(f"로그 파일을 열 수 없습니다: {log_dir} - {e}")
            return logger

        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

        return logger

    def parse_args(self, args: Optional[List[str]] = None) -> argparse.Namespace:
        """
        명령줄 인자 파싱

        Args:
            args: 파싱할 인자 리스트 (None이면 sys.argv 사용)

        Returns:
            argparse.Namespace: 파싱된 인자

        Raises:
            SystemExit: 잘못된 인자이거나 입력 파일과 --init이 모두 없을 때
        """
        parsed_args = self.parser.parse_args(args)

        if parsed_args.input and parsed_args.init:
            self.parser.error("<input>과 --init은 함께 사용할 수 없습니다")

        # 입력 파일도 --init도 없으면 도움말 출력
        if not parsed_args.input and not parsed_args.init:
            self.parser.print_help()
            sys.exit(1)

        return parsed_args

    def load_config(self, config_path: Optional[str] = None) -> Configuration:
        """
        설정 파일 탐색 및 로드

        Args:
            config_path: --config 로 지정된 경로 (None이면 현재 디렉터리, 홈 순서로 탐색)

        Returns:
            Configuration: 로드된 설정 객체 (설정 파일이 없으면 기본 설정)

        Raises:
            ConfigurationError: 설정 파일 로드 실패 시
        """
        try:
            path = resolve_config_path(config_path)
            self.config_path = path
            if path is None:
                self.config = set_config(default_config())
                self.logger.info("설정 파일이 없어 기본 설정을 사용합니다")
            else:
                self.config = load_config(path)
                self.logger.info(f"설정 파일 로드 성공: {path}")
            return self.config
        except ConfigurationError as e:
            self.logger.error(f"설정 파일 로드 실패: {e}")
            raise

    def execute(self, args: Optional[List[str]] = None) -> int:
        """
        CLI 명령어 실행

        Args:
            args: 명령줄 인자 리스트 (None이면 sys.argv 사용)

        Returns:
            int: 종료 코드 (0: 성공, 1: 실패, 2: 인자 오류)
        """
        try:
            parsed_args = self.parse_args(args)

            if parsed_args.init:
                return self._handle_init(parsed_args)
            return self._handle_run(parsed_args)

        except SystemExit as e:
            # argparse가 발생시킨 SystemExit (잘못된 인자, --help, --version 등)
            return e.code if e.code is not None else 2
        except KeyboardInterrupt:
            self.logger.warning("사용자에 의해 중단되었습니다")
            return 1
        except Exception as e:
            self.logger.exception(f"실행 중 오류 발생: {e}")
            return 1

    def _handle_init(self, args: argparse.Namespace) -> int:
        """
        --init 핸들러

        Args:
            args: 파싱된 인자

        Returns:
            int: 종료 코드
        """
        try:
            path = initialize_config(args.init)
            print(f"설정 파일을 생성했습니다: {path}")
            return 0
        except ConfigurationError as e:
            self.logger.error(f"설정 파일 생성 실패: {e}")
            print(f"오류: {e}", file=sys.stderr)
            return 1

    def _handle_run(self, args: argparse.Namespace) -> int:
        """
        로그 추적 화면 실행 핸들러

        Args:
            args: 파싱된 인자

        Returns:
            int: 종료 코드
        """
        try:
            config = self.load_config(args.config)
            settings = resolve_settings(
                config,
                cli_lines=args.lines,
                cli_max_lines=args.max_lines,
                config_path=self.config_path,
            )
            self.logger.info(
                f"입력: {args.input}, lines={settings.lines}, max={settings.max_lines}, "
                f"설정 파일: {settings.config_path or '(기본 설정)'}"
            )

            tailer = FileTailer(args.input, max_lines=settings.max_lines)
        except (ConfigurationError, TailError) as e:
            print(f"오류: {e}", file=sys.stderr)
            return 1

        if not self._is_terminal():
            tailer.close()
            self.logger.error("터미널이 아닌 환경에서는 화면을 표시할 수 없습니다")
            print("오류: flow는 터미널에서 실행해야 합니다", file=sys.stderr)
            return 1

        with tailer:
            app = self._create_app(config, tailer, settings)
            return self._run_app(app)

    def _is_terminal(self) -> bool:
        return sys.stdin.isatty() and sys.stdout.isatty()

    def _create_app(
        self, config: Configuration, tailer: FileTailer, settings: Settings
    ) -> FlowApp:
        session = FlowSession(config, settings.max_lines)
        return FlowApp(session, tailer, settings)

    def _run_app(self, app: FlowApp) -> int:
        """curses 화면이 켜져 있는 동안 콘솔 로그 출력을 막고 앱을 실행합니다."""
        console_level = None
        if self._console_handler is not None:
            console_level = self._console_handler.level
            self._console_handler.setLevel(logging.CRITICAL + 1)
        try:
            return app.run()
        finally:
            if self._console_handler is not None and console_level is not None:
                self._console_handler.setLevel(console_level)

