"""
Exception hierarchy for layerparams.

Every error raised by the library derives from ParameterMergeError so
callers can catch the whole family with one clause. The merge engine
itself only ever raises FormatError; ParameterStoreError belongs to the
file-backed scope store.
"""

from __future__ import annotations

import pathlib as _pathlib


class ParameterMergeError(Exception):
    """Base class for all layerparams errors."""

    pass


class FormatError(ParameterMergeError):
    """
    A parameter document is neither valid JSON nor valid YAML.

    Attributes:
        index: Position of the failing document in the input list, if known.
        scope_name: Scope that supplied the document, if known.
        detail: Message from the underlying parser.
    """

    def __init__(
        self,
        detail: str,
        *,
        index: int | None = None,
        scope_name: str | None = None,
    ) -> None:
        self.detail = detail
        self.index = index
        self.scope_name = scope_name
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        where: list[str] = []
        if self.index is not None:
            where.append(f"source #{self.index}")
        if self.scope_name is not None:
            where.append(f"scope {self.scope_name!r}")
        if where:
            return f"Invalid parameter document ({', '.join(where)}): {self.detail}"
        return f"Invalid parameter document: {self.detail}"


class ParameterStoreError(ParameterMergeError):
    """Error reading a parameter file from the scope store."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in parameter file {path}: {message}")
