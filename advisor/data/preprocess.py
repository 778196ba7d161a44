from typing import Iterable


def normalize_text(text: str) -> str:
    if not text:
        return ""
    return str(text).strip().lower()


def contains_ci(haystack: str, needle: str) -> bool:
    """Case-insensitive substring test. An empty needle matches anything."""
    return normalize_text(needle) in normalize_text(haystack)


def any_contains_ci(haystacks: Iterable[str], needles: Iterable[str]) -> bool:
    needles = list(needles)
    return any(contains_ci(h, n) for h in haystacks for n in needles)
