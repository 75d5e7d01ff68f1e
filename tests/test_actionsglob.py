import pytest

from arctools.actionsglob import match


@pytest.mark.parametrize(
    ("pattern", "target", "want"),
    [
        ("foo", "foo", True),
        ("!foo", "foo", False),
        ("foo", "foo1", False),
        ("!foo", "foo1", True),
        ("*foo", "foo", True),
        ("!*foo", "foo", False),
        ("*foo", "1foo", True),
        ("!*foo", "1foo", False),
        ("*foo", "foo1", False),
        ("!*foo", "foo1", True),
        ("*foo*", "foo1", True),
        ("!*foo*", "foo1", False),
        ("*foo", "foobar", False),
        ("!*foo", "foobar", True),
        ("*foo*", "foobar", True),
        ("!*foo*", "foobar", False),
        ("foo*", "foo", True),
        ("!foo*", "foo", False),
        ("foo*", "foobar", True),
        ("!foo*", "foobar", False),
        ("foo (*", "foo ( 1 / 2 )", True),
        ("!foo (*", "foo ( 1 / 2 )", False),
        ("actions-*-metrics", "actions-workflow-metrics", True),
        ("!actions-*-metrics", "actions-workflow-metrics", False),
    ],
)
def test_match(pattern, target, want):
    assert match(pattern, target) is want


def test_empty_pattern_raises():
    with pytest.raises(ValueError):
        match("", "foo")


def test_literal_absent_from_target_does_not_match():
    assert match("*foo", "bar") is False
    assert match("!*foo", "bar") is True


def test_literal_against_empty_target_does_not_match():
    assert match("foo", "") is False


def test_lone_wildcard_matches_anything():
    assert match("*", "anything at all") is True
    assert match("!*", "anything at all") is False