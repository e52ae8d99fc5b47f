"""
Document codec: parameter text <-> structured values.

Parsing:
- Trimmed input starting with "{" is parsed as JSON.
- Anything else is parsed as YAML (safe subset, no timestamps).
- Blank input yields an empty mapping.
- Documents nested deeper than MAX_NESTING_DEPTH are rejected.
- A root that is not a mapping degrades to an empty mapping with a
  warning, or raises FormatError when strict_root is set.

Serialization:
- JSON is pretty-printed with two-space indentation; .inf and .nan
  cannot be written as JSON and raise FormatError.
- YAML is block style with keys in insertion order and written verbatim.

The loader and dumper classes below are built once at import time and
never mutated afterwards, so the codec is safe to share between threads.
"""

from __future__ import annotations

import enum as _enum
import json as _json
import logging as _logging
import typing as _typing

import yaml as _yaml

import layerparams.constants as constants
import layerparams.errors as errors
import layerparams.values as values

_logger = _logging.getLogger(__name__)

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class OutputFormat(_enum.Enum):
    """Serialization format for merged documents."""

    YAML = "yaml"
    JSON = "json"


# =============================================================================
# YAML loader / dumper
# =============================================================================


class _ParameterLoader(_yaml.SafeLoader):
    """
    SafeLoader without the implicit timestamp resolver, with string keys.

    Dates and times stay strings so every parsed value is a plain
    structured value that both serializers can write back. Keys are
    stringified as each mapping is built, so 1, true and 1.0 stay three
    distinct keys instead of collapsing into one dict entry.
    """

    def construct_mapping(
        self, node: _yaml.MappingNode, deep: bool = False
    ) -> dict[str, _typing.Any]:
        """Override to convert each key to a string before it is stored."""
        if not isinstance(node, _yaml.MappingNode):
            raise _yaml.constructor.ConstructorError(
                None, None, f"expected a mapping node, but found {node.id}", node.start_mark
            )
        # Expand "<<" merge keys the way SafeLoader does
        self.flatten_mapping(node)

        result: dict[str, _typing.Any] = {}
        for key_node, value_node in node.value:
            key = self.construct_object(key_node, deep=True)
            if isinstance(key, (dict, list)):
                raise _yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found unsupported {type(key).__name__} key",
                    key_node.start_mark,
                )
            result[_convert_key(key)] = self.construct_object(value_node, deep=deep)

        return result


_ParameterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in _yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class _ParameterDumper(_yaml.SafeDumper):
    """SafeDumper that indents sequences under their key and never emits aliases."""

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> None:
        del indentless  # Always indent block sequences
        super().increase_indent(flow, False)

    def ignore_aliases(self, data: _typing.Any) -> bool:
        del data
        return True


# =============================================================================
# Parsing
# =============================================================================


def _parse_json_int(literal: str) -> int | float:
    """JSON integers stay exact within 64 bits, otherwise widen to float."""
    return values.widen_int(int(literal))


def _reject_json_constant(name: str) -> _typing.NoReturn:
    """NaN and Infinity are not JSON."""
    raise ValueError(f"invalid JSON constant {name!r}")


def _convert_key(key: _typing.Any) -> str:
    """Convert a YAML mapping key to a string key."""
    if key is None:
        return ""
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


def _convert(value: _typing.Any, active: set[int]) -> _typing.Any:
    """
    Rebuild a parsed YAML tree as owned structured values.

    YAML anchors make PyYAML hand back shared containers; rebuilding gives
    every subtree its own copy. Recursive anchors are rejected.

    Args:
        value: Value produced by the YAML loader.
        active: Ids of containers on the current recursion path.

    Returns:
        Structured value.

    Raises:
        FormatError: If the document contains unsupported or cyclic values.
    """
    if value is None or isinstance(value, (bool, str, float)):
        return value
    if isinstance(value, int):
        return values.widen_int(value)

    if isinstance(value, (dict, list, tuple)):
        obj_id = id(value)
        if obj_id in active:
            raise errors.FormatError("recursive YAML alias")
        active.add(obj_id)
        try:
            if isinstance(value, dict):
                return {key: _convert(item, active) for key, item in value.items()}
            return [_convert(item, active) for item in value]
        finally:
            active.discard(obj_id)

    raise errors.FormatError(f"unsupported YAML value of type {type(value).__name__}")


def _parse_json(text: str) -> _typing.Any:
    return _json.loads(
        text,
        parse_int=_parse_json_int,
        parse_constant=_reject_json_constant,
    )


def _parse_yaml(text: str) -> _typing.Any:
    loaded = _yaml.load(text, Loader=_ParameterLoader)  # noqa: S506 - SafeLoader subclass
    return _convert(loaded, set())


def _nesting_depth(value: _typing.Any) -> int:
    """Deepest container nesting of a parsed value, without recursion."""
    deepest = 0
    stack: list[tuple[_typing.Any, int]] = [(value, 1)]
    while stack:
        current, depth = stack.pop()
        if isinstance(current, dict):
            children: _typing.Iterable[_typing.Any] = current.values()
        elif isinstance(current, list):
            children = current
        else:
            continue
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for child in children)
    return deepest


def parse(
    text: str,
    *,
    index: int | None = None,
    scope_name: str | None = None,
    strict_root: bool = False,
) -> dict[str, _typing.Any]:
    """
    Parse a parameter document into a mapping.

    Args:
        text: Raw YAML or JSON text.
        index: Position of the document in the caller's list (for errors/logs).
        scope_name: Scope that supplied the document (for errors/logs).
        strict_root: Raise instead of degrading when the root is not a mapping.

    Returns:
        The parsed mapping. Blank input gives an empty mapping.

    Raises:
        FormatError: If the text is malformed or nested too deeply, or the
            root is not a mapping and strict_root is set.
    """
    content = text.strip()

    if content.startswith("{"):
        try:
            parsed = _parse_json(content)
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            raise errors.FormatError(
                f"invalid JSON: {e}", index=index, scope_name=scope_name
            ) from e
        except RecursionError as e:
            raise errors.FormatError(
                "invalid JSON: document is nested too deeply",
                index=index,
                scope_name=scope_name,
            ) from e
    else:
        try:
            parsed = _parse_yaml(content)
        except errors.FormatError as e:
            raise errors.FormatError(e.detail, index=index, scope_name=scope_name) from e
        except RecursionError as e:
            raise errors.FormatError(
                "invalid YAML: document is nested too deeply",
                index=index,
                scope_name=scope_name,
            ) from e
        except _yaml.YAMLError as e:
            raise errors.FormatError(
                f"invalid YAML: {e}", index=index, scope_name=scope_name
            ) from e

    if parsed is None:
        return {}

    if not isinstance(parsed, dict):
        type_name = values.kind_of(parsed).value
        if strict_root:
            raise errors.FormatError(
                f"document root must be a mapping, got {type_name}",
                index=index,
                scope_name=scope_name,
            )
        _logger.warning(
            "Parameter document %s has a %s root; treating it as empty",
            index if index is not None else "?",
            type_name,
        )
        return {}

    if _nesting_depth(parsed) > constants.MAX_NESTING_DEPTH:
        raise errors.FormatError(
            f"document is nested deeper than {constants.MAX_NESTING_DEPTH} levels",
            index=index,
            scope_name=scope_name,
        )

    return parsed


# =============================================================================
# Serialization
# =============================================================================


def serialize(
    value: dict[str, _typing.Any],
    output_format: OutputFormat = OutputFormat.YAML,
    *,
    include_comments: bool = False,
) -> str:
    """
    Serialize a merged mapping to text.

    Args:
        value: The mapping to write.
        output_format: YAML or JSON.
        include_comments: Accepted for compatibility; has no effect.

    Returns:
        The serialized document.

    Raises:
        FormatError: If JSON output is requested and the value holds a
            non-finite float (YAML .inf / .nan), which JSON cannot represent.
    """
    if include_comments:
        _logger.debug("include_comments has no effect on serialized output")

    if output_format is OutputFormat.JSON:
        try:
            return _json.dumps(value, indent=2, ensure_ascii=False, allow_nan=False)
        except ValueError as e:
            raise errors.FormatError(f"cannot write JSON: {e}") from e

    return _yaml.dump(
        value,
        Dumper=_ParameterDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
