"""
Filter Engine 테스트

다음 시나리오를 검증합니다:
1. 조건 없는 필터는 모든 줄 표시
2. contains / starts_with / ends_with / regex 조건의 AND 결합
3. 대소문자 무시
4. start 조건에 따른 여러 줄 항목 구성 (스택 트레이스)
5. start / end 조건에 따른 블록 구성
"""

from flow.config.config_manager import Condition, Filter
from flow.core.filter_engine import FilterMatcher, build_matchers
from flow.models.line import Line


def parse_all(texts):
    return [Line.parse(text) for text in texts]


def texts(lines):
    return [line.text for line in lines]


def test_empty_filter_shows_everything():
    lines = parse_all(["a", "b", "c"])

    assert texts(FilterMatcher(Filter(name="All")).apply(lines)) == ["a", "b", "c"]


def test_contains():
    lines = parse_all(["INFO ok", "ERROR bad", "WARN meh"])
    matcher = FilterMatcher(Filter(name="Errors", contains="ERROR"))

    assert texts(matcher.apply(lines)) == ["ERROR bad"]


def test_conditions_are_combined():
    """모든 조건을 만족해야 매칭"""
    lines = parse_all(["[db] slow query;", "[db] fast query", "[web] slow request;"])
    matcher = FilterMatcher(
        Filter(name="Slow db", starts_with="[db]", ends_with=";", contains="slow")
    )

    assert texts(matcher.apply(lines)) == ["[db] slow query;"]


def test_regex_and_ignore_case():
    lines = parse_all(["GET /a 200", "get /b 500", "POST /c 503"])
    matcher = FilterMatcher(
        Filter(name="5xx", regex=r"\b5\d\d$", starts_with="GET", ignore_case=True)
    )

    assert texts(matcher.apply(lines)) == ["get /b 500"]


def test_conditions_use_text_without_ansi():
    lines = parse_all(["\x1b[31mERROR\x1b[0m boom"])
    matcher = FilterMatcher(Filter(name="Errors", starts_with="ERROR"))

    assert texts(matcher.apply(lines)) == ["ERROR boom"]


STACK_TRACE_LOG = [
    "2024-01-01 INFO start",
    "2024-01-01 ERROR boom",
    "  at foo()",
    "  at bar()",
    "2024-01-01 INFO ok",
]


def test_start_groups_continuation_lines():
    """start 줄 뒤의 연속 줄은 같은 항목"""
    matcher = FilterMatcher(
        Filter(name="Errors", contains="ERROR", start=Condition(regex=r"^\d{4}"))
    )

    assert texts(matcher.apply(parse_all(STACK_TRACE_LOG))) == [
        "2024-01-01 ERROR boom",
        "  at foo()",
        "  at bar()",
    ]


def test_entry_matches_on_continuation_line():
    """연속 줄이 매칭되어도 항목 전체를 표시"""
    matcher = FilterMatcher(
        Filter(name="bar", contains="bar()", start=Condition(regex=r"^\d{4}"))
    )

    assert texts(matcher.apply(parse_all(STACK_TRACE_LOG))) == [
        "2024-01-01 ERROR boom",
        "  at foo()",
        "  at bar()",
    ]


REQUEST_LOG = [
    "noise",
    "Started GET",
    "status 500",
    "Completed",
    "tail 500",
    "Started POST",
    "status 200",
    "Completed",
]


def request_filter():
    return Filter(
        name="Failed",
        contains="500",
        start=Condition(contains="Started"),
        end=Condition(contains="Completed"),
    )


def test_start_end_grouping():
    matcher = FilterMatcher(request_filter())

    assert [texts(entry) for entry in matcher.group_entries(parse_all(REQUEST_LOG))] == [
        ["noise"],
        ["Started GET", "status 500", "Completed"],
        ["tail 500"],
        ["Started POST", "status 200", "Completed"],
    ]


def test_start_end_filtering():
    """end 이후의 줄은 독립된 항목으로 판단"""
    matcher = FilterMatcher(request_filter())

    assert texts(matcher.apply(parse_all(REQUEST_LOG))) == [
        "Started GET",
        "status 500",
        "Completed",
        "tail 500",
    ]


def test_line_matching_start_and_end_is_single_entry():
    matcher = FilterMatcher(
        Filter(
            name="Block",
            start=Condition(contains="<"),
            end=Condition(contains=">"),
        )
    )

    entries = matcher.group_entries(parse_all(["<one>", "after"]))

    assert [texts(entry) for entry in entries] == [["<one>"], ["after"]]


def test_build_matchers():
    matchers = build_matchers([Filter(name="All"), Filter(name="Errors", contains="E")])

    assert [matcher.name for matcher in matchers] == ["All", "Errors"]
    assert not matchers[0].groups_entries
