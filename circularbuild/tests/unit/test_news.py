# circularbuild/tests/unit/test_news.py
import pytest

from circularbuild.domain.news import build_excerpt, display_name, estimate_read_minutes


def test_excerpt_strips_markdown():
    body = (
        "# Salvage day\n\n"
        "![crew](https://cdn.example.com/crew.jpg)\n"
        "Read the **full** [report](https://example.com/report).\n"
        "```\nprint('ignored')\n```\n"
        "Use `code` sparingly."
    )

    assert build_excerpt(body) == (
        "Salvage day Read the full https://example.com/report. Use sparingly."
    )


def test_excerpt_truncates_long_body():
    excerpt = build_excerpt("word " * 100, limit=20)

    assert len(excerpt) == 20
    assert excerpt.endswith("…")
    assert build_excerpt("short", limit=20) == "short"


@pytest.mark.parametrize(
    "words, minutes",
    [(0, 1), (1, 1), (200, 1), (201, 2), (1000, 5)],
)
def test_estimate_read_minutes(words, minutes):
    assert estimate_read_minutes(" ".join(["reuse"] * words)) == minutes


def test_display_name_fallbacks():
    assert display_name("Sam", "sam@example.com") == "Sam"
    assert display_name(None, "sam@example.com") == "sam@example.com"
    assert display_name(None) == "CircularBuild member"
