"""
Merge engine: fold an ordered list of mappings into one.

Merge rules, applied at every nesting level:
- key only in the accumulator: kept
- key only in the source: inserted (deep copy)
- both values are mappings: merged recursively
- anything else: the source value replaces the accumulator value

Sequences are never merged element by element; a later sequence replaces
an earlier one under the same key. None is an ordinary leaf value.

Precedence is list order: the first mapping is the lowest priority, the
last one wins. Inputs are never modified.

Example:
    >>> fold([{"db": {"host": "dev", "port": 5432}}, {"db": {"host": "prod"}}])
    {'db': {'host': 'prod', 'port': 5432}}
"""

from __future__ import annotations

import copy as _copy
import logging as _logging
import typing as _typing

import layerparams.values as values

_logger = _logging.getLogger(__name__)


def merge_into(
    target: dict[str, _typing.Any],
    source: _typing.Mapping[str, _typing.Any],
) -> None:
    """
    Merge source into target in place, source taking priority.

    Args:
        target: The accumulator. Modified in place.
        source: The higher-priority mapping. Never modified; values are
            deep-copied before insertion.
    """
    for key, value in source.items():
        if key not in target:
            target[key] = _copy.deepcopy(value)
            continue

        existing = target[key]
        if values.is_mapping(existing) and values.is_mapping(value):
            merge_into(existing, value)
        else:
            # Replace (scalar, sequence, null, or type mismatch)
            target[key] = _copy.deepcopy(value)


def fold(
    mappings: _typing.Sequence[_typing.Mapping[str, _typing.Any]],
) -> dict[str, _typing.Any]:
    """
    Fold mappings from lowest to highest priority into a new mapping.

    Args:
        mappings: Mappings in ascending priority (last one wins).

    Returns:
        New merged mapping. Empty when no mappings are given.
    """
    if not mappings:
        return {}

    result: dict[str, _typing.Any] = _copy.deepcopy(dict(mappings[0]))
    for index, mapping in enumerate(mappings[1:], start=1):
        _logger.debug("Merging source %d (%d top-level keys)", index, len(mapping))
        merge_into(result, mapping)

    return result
