"""Collision-free credential names."""

from __future__ import annotations

from collections.abc import Collection


def allocate_name(existing_names: Collection[str], base: str) -> str:
    """Return ``base`` + the smallest positive integer suffix not already taken.

    At most ``len(existing_names) + 1`` candidates are tried: by pigeonhole
    one of ``base1 .. base{n+1}`` is free.
    """
    taken = set(existing_names)
    for suffix in range(1, len(taken) + 2):
        candidate = f"{base}{suffix}"
        if candidate not in taken:
            return candidate
    raise AssertionError("unreachable: a free suffix always exists")
