"""
Provenance ledger: which scope set each merged leaf, and what it replaced.

The ledger maps a dot-joined key path (e.g. "server.host") to a
ProvenanceRecord. It is built during the same left-to-right fold the
merge engine performs, with these rules:

- The first layer is the baseline. Its values are never recorded.
- Only leaves are recorded (scalars, null, sequences). A mapping key is
  never a ledger path; an inserted mapping has its leaves recorded instead.
- When a later layer replaces a recorded leaf, the previous record and its
  own override history are carried into overridden_values, newest first.
  Replacing a baseline value captures nothing, since the baseline has no
  record.

Paths are a plain join of raw keys, so a key containing "." cannot be told
apart from a nesting boundary.

Example:
    >>> layers = [
    ...     ProvenanceLayer("Global", 1, {"value": "a"}),
    ...     ProvenanceLayer("Environment", 2, {"value": "b"}),
    ...     ProvenanceLayer("Node", 3, {"value": "c"}),
    ... ]
    >>> merged, ledger = fold_with_provenance(layers)
    >>> ledger["value"].scope_name, ledger["value"].overridden_values[0].scope_name
    ('Node', 'Environment')
"""

from __future__ import annotations

import copy as _copy
import dataclasses as _dataclasses
import logging as _logging
import typing as _typing

import pydantic as _pydantic
import pydantic.alias_generators as _alias_generators

import layerparams.constants as constants
import layerparams.values as values

_logger = _logging.getLogger(__name__)


def join_path(parent: str, key: str) -> str:
    """Join a child key onto a ledger path ("" is the document root)."""
    if not parent:
        return key
    return f"{parent}{constants.PATH_SEPARATOR}{key}"


# =============================================================================
# Records
# =============================================================================


class ScopeValue(_pydantic.BaseModel):
    """A value contributed by one scope."""

    model_config = _pydantic.ConfigDict(
        frozen=True,
        alias_generator=_alias_generators.to_camel,
        populate_by_name=True,
    )

    scope_name: str
    """Name of the scope that supplied the value."""

    precedence: int
    """Precedence of that scope."""

    value: _typing.Any = None
    """The leaf value."""


class ProvenanceRecord(_pydantic.BaseModel):
    """
    Origin of one merged leaf value.

    overridden_values lists the recorded values this one replaced, most
    recent first, or is None when nothing recorded was replaced.
    """

    model_config = _pydantic.ConfigDict(
        frozen=True,
        alias_generator=_alias_generators.to_camel,
        populate_by_name=True,
    )

    scope_name: str
    """Name of the scope whose value won."""

    precedence: int
    """Precedence of the winning scope."""

    value: _typing.Any = None
    """The winning leaf value."""

    overridden_values: list[ScopeValue] | None = None
    """Values replaced by this one, newest first."""

    def as_scope_value(self) -> ScopeValue:
        """Drop the override history, keeping who set what."""
        return ScopeValue(
            scope_name=self.scope_name,
            precedence=self.precedence,
            value=self.value,
        )

    def to_api(self) -> dict[str, _typing.Any]:
        """
        Serialize for an API boundary.

        Returns:
            {scopeName, precedence, value, overriddenValues?}. The
            overriddenValues key is omitted when there is no history;
            a None value is kept.
        """
        exclude = {"overridden_values"} if self.overridden_values is None else None
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)


# =============================================================================
# Fold with provenance
# =============================================================================


@_dataclasses.dataclass(frozen=True, slots=True)
class ProvenanceLayer:
    """One parsed source taking part in a provenance fold."""

    scope_name: str
    precedence: int
    parameters: _typing.Mapping[str, _typing.Any]


class ProvenanceTracker:
    """
    Merges layers into an accumulator while keeping the ledger current.

    The tracker is single-use: create one per fold.
    """

    def __init__(self) -> None:
        self._records: dict[str, ProvenanceRecord] = {}

    @property
    def records(self) -> dict[str, ProvenanceRecord]:
        """The ledger built so far."""
        return self._records

    def merge_layer(self, target: dict[str, _typing.Any], layer: ProvenanceLayer) -> None:
        """
        Merge a non-baseline layer into target, recording provenance.

        Args:
            target: The accumulator. Modified in place.
            layer: The layer to merge. Never modified.
        """
        self._merge_into(target, layer.parameters, layer, "")

    def _merge_into(
        self,
        target: dict[str, _typing.Any],
        source: _typing.Mapping[str, _typing.Any],
        layer: ProvenanceLayer,
        parent_path: str,
    ) -> None:
        for key, value in source.items():
            path = join_path(parent_path, key)

            if key not in target:
                target[key] = _copy.deepcopy(value)
                self._record_new(path, value, layer)
                continue

            existing = target[key]
            if values.is_mapping(existing) and values.is_mapping(value):
                self._merge_into(existing, value, layer, path)
                continue

            target[key] = _copy.deepcopy(value)

            if values.is_mapping(existing):
                # Leaves recorded under the old mapping no longer exist
                self._drop_descendants(path)

            if values.is_mapping(value):
                self._records.pop(path, None)
                self._record_new(path, value, layer)
            else:
                self._record_override(path, value, layer)

    def _record_new(self, path: str, value: _typing.Any, layer: ProvenanceLayer) -> None:
        """Record a freshly inserted value, descending into mappings."""
        if values.is_mapping(value):
            for key, child in value.items():
                self._record_new(join_path(path, key), child, layer)
            return

        self._records[path] = ProvenanceRecord(
            scope_name=layer.scope_name,
            precedence=layer.precedence,
            value=_copy.deepcopy(value),
        )

    def _record_override(self, path: str, value: _typing.Any, layer: ProvenanceLayer) -> None:
        """Record a leaf replacement, carrying the previous record's history."""
        overridden: list[ScopeValue] = []

        previous = self._records.get(path)
        if previous is not None:
            overridden.append(previous.as_scope_value())
            if previous.overridden_values:
                overridden.extend(previous.overridden_values)

        self._records[path] = ProvenanceRecord(
            scope_name=layer.scope_name,
            precedence=layer.precedence,
            value=_copy.deepcopy(value),
            overridden_values=overridden or None,
        )

    def _drop_descendants(self, path: str) -> None:
        prefix = path + constants.PATH_SEPARATOR
        stale = [p for p in self._records if p.startswith(prefix)]
        for p in stale:
            del self._records[p]


def fold_with_provenance(
    layers: _typing.Sequence[ProvenanceLayer],
) -> tuple[dict[str, _typing.Any], dict[str, ProvenanceRecord]]:
    """
    Fold layers (ascending precedence) and build the provenance ledger.

    Args:
        layers: Parsed layers, lowest precedence first. The caller sorts.

    Returns:
        Tuple of (merged_mapping, ledger).
    """
    if not layers:
        return {}, {}

    result: dict[str, _typing.Any] = _copy.deepcopy(dict(layers[0].parameters))
    tracker = ProvenanceTracker()

    for layer in layers[1:]:
        _logger.debug(
            "Merging scope %r (precedence %d) with provenance",
            layer.scope_name,
            layer.precedence,
        )
        tracker.merge_layer(result, layer)

    return result, tracker.records
