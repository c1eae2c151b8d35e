"""
Unit tests for URL helpers.
"""
import pytest

from cms.core.urls import tidy_url


@pytest.mark.unit
@pytest.mark.parametrize(
    "value,expected",
    [
        ("Nested Page", "nested-page"),
        ("  Hello,   World!  ", "hello-world"),
        ("Already-tidy", "already-tidy"),
        ("multiple---hyphens", "multiple-hyphens"),
        ("Parent Page/Child Page", "parent-page/child-page"),
        ("/leading/and/trailing/", "leading/and/trailing"),
        ("a//b", "a/b"),
        ("", ""),
        ("!!!", ""),
    ],
)
def test_tidy_url(value, expected):
    assert tidy_url(value) == expected


@pytest.mark.unit
def test_tidy_url_handles_none():
    assert tidy_url(None) == ""
