# circularbuild/domain/news.py
import math
import re

EXCERPT_LIMIT = 220
WORDS_PER_MINUTE = 200
ANONYMOUS_MEMBER_NAME = "CircularBuild member"

_FENCED_CODE = re.compile(r"```[\s\S]*?```")
_INLINE_CODE = re.compile(r"`[^`]*`")
_IMAGE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_LINK = re.compile(r"\[[^\]]*\]\(([^)]*)\)")
_MARKUP = re.compile(r"[#>*_~`-]")
_WHITESPACE = re.compile(r"\s+")


def build_excerpt(body: str, limit: int = EXCERPT_LIMIT) -> str:
    """Plain-text preview of a markdown post body.

    Code and images are dropped, links collapse to their target and
    emphasis characters are removed. Text longer than ``limit`` is cut to
    ``limit - 1`` characters plus an ellipsis.
    """
    plain = _FENCED_CODE.sub("", body or "")
    plain = _INLINE_CODE.sub("", plain)
    plain = _IMAGE.sub("", plain)
    plain = _LINK.sub(r"\1", plain)
    plain = _MARKUP.sub("", plain)
    plain = _WHITESPACE.sub(" ", plain).strip()
    if len(plain) > limit:
        return f"{plain[:limit - 1]}…"
    return plain


def estimate_read_minutes(body: str) -> int:
    words = (body or "").split()
    return max(1, math.ceil(len(words) / WORDS_PER_MINUTE))


def display_name(name: str | None, email: str | None = None) -> str:
    return name or email or ANONYMOUS_MEMBER_NAME
