"""
File-backed store of per-scope parameter documents.

Layout under the data directory:

    parameters/<configuration>/Default/parameters.yaml
    parameters/<configuration>/<ScopeType>/<value>/parameters.yaml
    parameters/<configuration>/Node/<fqdn>/parameters.yaml

collect_sources() gathers the documents that apply to one node, in
ascending precedence, ready for ParameterMerger:

1. Default scope (unless a tag already names the Default scope type)
2. Tagged scopes, ordered by precedence
3. Node scope, keyed by the node FQDN

Missing files are skipped; a node with no matching files gets an empty
source list.
"""

from __future__ import annotations

import logging as _logging
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic

import layerparams.constants as constants
import layerparams.errors as errors
import layerparams.merger as merger

_logger = _logging.getLogger(__name__)


class ScopeTag(_pydantic.BaseModel):
    """Assignment of a node to one value of a scope type."""

    model_config = _pydantic.ConfigDict(frozen=True)

    scope_type: str
    """Scope type name (e.g. "Environment", "Region")."""

    value: str
    """Scope value (e.g. "Production", "eu-west")."""

    precedence: int
    """Precedence of the scope type."""

    @property
    def scope_name(self) -> str:
        """Label used for provenance: "<type>:<value>"."""
        return scope_name(self.scope_type, self.value)


def scope_name(scope_type: str, value: str | None = None) -> str:
    """Build the provenance label for a scope type and optional value."""
    if value is None:
        return scope_type
    return f"{scope_type}:{value}"


class ParameterStore:
    """
    Reads parameter documents from a scope directory tree.

    Args:
        data_dir: Root data directory (the parent of "parameters/").
    """

    def __init__(self, data_dir: _pathlib.Path | str) -> None:
        self._data_dir = _pathlib.Path(data_dir)

    @property
    def data_dir(self) -> _pathlib.Path:
        """Root data directory."""
        return self._data_dir

    def path_for(
        self,
        configuration: str,
        scope_type: str,
        value: str | None = None,
    ) -> _pathlib.Path:
        """
        Return the parameter file path for a scope.

        Raises:
            ParameterStoreError: If a name would escape the store directory.
        """
        parts = [configuration, scope_type] if value is None else [configuration, scope_type, value]
        path = self._data_dir / constants.PARAMETERS_DIRNAME
        for part in parts:
            if not part or part in (".", "..") or "/" in part or "\\" in part:
                raise errors.ParameterStoreError(path, f"invalid path component {part!r}")
            path = path / part
        return path / constants.PARAMETERS_FILENAME

    def read(
        self,
        configuration: str,
        scope_type: str,
        value: str | None = None,
    ) -> str | None:
        """
        Read a scope's parameter document.

        Returns:
            The file contents, or None if the file does not exist.

        Raises:
            ParameterStoreError: If the file exists but cannot be read.
        """
        path = self.path_for(configuration, scope_type, value)
        if not path.is_file():
            _logger.debug("No parameter file at %s", path)
            return None

        try:
            return path.read_text(encoding="utf-8")
        except PermissionError as e:
            raise errors.ParameterStoreError(path, f"permission denied: {e}") from e
        except UnicodeDecodeError as e:
            raise errors.ParameterStoreError(path, f"not valid UTF-8: {e}") from e
        except OSError as e:
            raise errors.ParameterStoreError(path, f"cannot read file: {e}") from e

    def collect_sources(
        self,
        configuration: str,
        *,
        node_fqdn: str,
        tags: _typing.Iterable[ScopeTag] = (),
        default_precedence: int = constants.DEFAULT_SCOPE_PRECEDENCE,
        node_precedence: int = constants.NODE_SCOPE_PRECEDENCE,
    ) -> list[merger.ParameterSource]:
        """
        Gather the parameter sources that apply to a node.

        Args:
            configuration: Configuration name.
            node_fqdn: Fully qualified name of the node.
            tags: Scope assignments of the node.
            default_precedence: Precedence of the Default scope.
            node_precedence: Precedence of the Node scope.

        Returns:
            Sources in ascending precedence. Scopes without a file are
            left out.

        Raises:
            ParameterStoreError: If an existing file cannot be read.
        """
        ordered_tags = sorted(tags, key=lambda t: t.precedence)
        sources: list[merger.ParameterSource] = []

        if not any(t.scope_type == constants.DEFAULT_SCOPE_TYPE for t in ordered_tags):
            content = self.read(configuration, constants.DEFAULT_SCOPE_TYPE)
            if content is not None:
                sources.append(
                    merger.ParameterSource(
                        scope_name=scope_name(constants.DEFAULT_SCOPE_TYPE),
                        precedence=default_precedence,
                        content=content,
                    )
                )

        for tag in ordered_tags:
            content = self.read(configuration, tag.scope_type, tag.value)
            if content is None:
                continue
            sources.append(
                merger.ParameterSource(
                    scope_name=tag.scope_name,
                    precedence=tag.precedence,
                    content=content,
                )
            )

        content = self.read(configuration, constants.NODE_SCOPE_TYPE, node_fqdn)
        if content is not None:
            sources.append(
                merger.ParameterSource(
                    scope_name=scope_name(constants.NODE_SCOPE_TYPE, node_fqdn),
                    precedence=node_precedence,
                    content=content,
                )
            )

        _logger.debug(
            "Collected %d parameter sources for %s/%s",
            len(sources),
            configuration,
            node_fqdn,
        )
        return sources
