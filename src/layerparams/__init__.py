"""
layerparams - layered parameter merging

Folds an ordered list of YAML/JSON parameter documents into one, merging
mappings recursively and replacing everything else, and can record which
scope supplied each final value.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("layerparams")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "layerparams Contributors"

from layerparams.errors import FormatError, ParameterMergeError  # noqa: E402
from layerparams.merger import (  # noqa: E402
    MergeOptions,
    MergeResult,
    OutputFormat,
    ParameterMerger,
    ParameterSource,
    merge,
    merge_with_provenance,
)
from layerparams.provenance import ProvenanceRecord, ScopeValue  # noqa: E402

__all__ = [
    "__version__",
    "__version_info__",
    "FormatError",
    "MergeOptions",
    "MergeResult",
    "OutputFormat",
    "ParameterMergeError",
    "ParameterMerger",
    "ParameterSource",
    "ProvenanceRecord",
    "ScopeValue",
    "merge",
    "merge_with_provenance",
]
