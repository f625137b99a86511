"""
공통 테스트 픽스처
"""

import pytest


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """로그 디렉터리와 flow 환경변수를 테스트마다 격리"""
    monkeypatch.setenv("FLOW_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("FLOW_LINES", raising=False)
    monkeypatch.delenv("FLOW_MAX", raising=False)


class FakeScreen:
    """curses 기본 화면(stdscr) 대체 객체"""

    def __init__(self, width=20, height=6, keys=None):
        self.width = width
        self.height = height
        self.keys = list(keys or [])
        self.writes = []

    def getmaxyx(self):
        return self.height, self.width

    def keypad(self, flag):
        pass

    def erase(self):
        self.writes = []

    def refresh(self):
        pass

    def addstr(self, row, column, text, attrs=0):
        self.writes.append((row, column, text, attrs))

    def get_wch(self):
        import curses

        if not self.keys:
            raise curses.error("no input")
        return self.keys.pop(0)

    def row_text(self, row):
        return "".join(text for r, _, text, _ in self.writes if r == row)


@pytest.fixture
def fake_curses(monkeypatch):
    """initscr 없이 Ui를 만들 수 있도록 curses 전역 함수를 대체"""
    import curses

    for name in ("cbreak", "noecho", "curs_set", "halfdelay", "mousemask", "mouseinterval"):
        monkeypatch.setattr(curses, name, lambda *args: None)
    monkeypatch.setattr(curses, "has_colors", lambda: False)
    monkeypatch.setattr(curses, "color_pair", lambda number: number << 8)
    monkeypatch.setattr(curses, "update_lines_cols", lambda: None, raising=False)
    return curses
