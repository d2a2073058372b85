import typing as t
from collections.abc import Mapping


def compact(values: Mapping[str, t.Any], sentinel: type) -> dict[str, t.Any]:
    """Drop entries whose value is an instance of the sentinel type."""
    return {k: v for k, v in values.items() if not isinstance(v, sentinel)}
