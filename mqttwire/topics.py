"""Validation and matching of MQTT topic names and topic filters."""

from __future__ import annotations


def has_wildcards(s: str) -> bool:
    """Return whether a topic or filter contains a ``+`` or ``#`` wildcard."""
    return "+" in s or "#" in s


def valid_topic(topic: str) -> bool:
    """Return whether ``topic`` is usable as a topic name (no wildcards)."""
    return not has_wildcards(topic)


def valid_filter(filter: str) -> bool:
    """Return whether ``filter`` is a well-formed subscription filter."""
    if not filter:
        return False

    *remaining, last = filter.split("/")
    for entry in remaining:
        # '#' is only allowed as the final level
        if "#" in entry:
            return False
        # '+' must occupy a whole level
        if len(entry) > 1 and "+" in entry:
            return False

    if len(last) != 1 and has_wildcards(last):
        return False

    return True


def matches(topic: str, filter: str) -> bool:
    """Return whether ``topic`` is matched by ``filter``.

    Neither argument is validated here; ``topic`` may itself be a filter.
    Topics starting with ``$`` never match.
    """
    if topic.startswith("$"):
        return False

    topics = iter(topic.split("/"))
    for level in filter.split("/"):
        if level == "#":
            return True

        current = next(topics, None)
        if current is None or current == "#":
            return False
        if level != "+" and level != current:
            return False

    return next(topics, None) is None