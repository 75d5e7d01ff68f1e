"""Glob matching in the style of GitHub Actions filter patterns."""

from __future__ import annotations

__all__ = ["match"]


def _tokens(pattern: str) -> list[str]:
    """Split a pattern after every ``*``, keeping the ``*`` on each piece."""
    parts = pattern.split("*")
    return [part + "*" for part in parts[:-1]] + [parts[-1]]


def _match_positive(pattern: str, s: str) -> bool:
    rest = s
    wildcard_in_head = False

    for token in _tokens(pattern):
        if token == "":
            rest = ""
            break

        if token == "*":
            wildcard_in_head = True
            continue

        wildcard_in_tail = token.endswith("*")
        literal = token[:-1] if wildcard_in_tail else token

        head, found, tail = rest.partition(literal)
        if not found:
            return False

        if head and not wildcard_in_head:
            return False

        if tail and not wildcard_in_tail:
            return False

        rest = tail
        wildcard_in_head = wildcard_in_tail

    return rest == ""


def match(pattern: str, s: str) -> bool:
    """Return whether ``s`` matches ``pattern``.

    ``*`` matches any run of characters, and a leading ``!`` inverts the result.
    """
    if not pattern:
        raise ValueError(f"unexpected length of pattern: {len(pattern)}")

    inverse = pattern.startswith("!")
    if inverse:
        pattern = pattern[1:]

    result = _match_positive(pattern, s)
    return not result if inverse else result