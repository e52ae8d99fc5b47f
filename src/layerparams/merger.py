"""
Public merge surface.

ParameterMerger ties the codec, the merge engine and the provenance
ledger together:

- merge(): raw documents in caller order -> merged text
- merge_with_provenance(): scoped sources, sorted by precedence ->
  merged text plus the provenance ledger

Example:
    >>> merger = ParameterMerger()
    >>> print(merger.merge(["server: localhost\\nport: 8080", "server: prod"]))
    server: prod
    port: 8080
"""

from __future__ import annotations

import logging as _logging
import typing as _typing

import pydantic as _pydantic
import pydantic.alias_generators as _alias_generators

import layerparams.codec as codec
import layerparams.engine as engine
import layerparams.provenance as prov

if _typing.TYPE_CHECKING:
    import layerparams.config as config

_logger = _logging.getLogger(__name__)

OutputFormat = codec.OutputFormat


class MergeOptions(_pydantic.BaseModel):
    """Options controlling merge output."""

    model_config = _pydantic.ConfigDict(frozen=True, extra="forbid")

    output_format: OutputFormat = OutputFormat.YAML
    """Format of the merged document."""

    include_comments: bool = False
    """Accepted for compatibility. Has no effect on output."""

    strict_root: bool = False
    """Raise FormatError for documents whose root is not a mapping."""

    @classmethod
    def from_settings(cls, settings: config.Settings) -> MergeOptions:
        """Build options from ambient settings."""
        return cls(
            output_format=settings.output_format,
            include_comments=settings.include_comments,
            strict_root=settings.strict_root,
        )


class ParameterSource(_pydantic.BaseModel):
    """A parameter document supplied by one scope."""

    model_config = _pydantic.ConfigDict(
        frozen=True,
        alias_generator=_alias_generators.to_camel,
        populate_by_name=True,
    )

    scope_name: str
    """Free-form scope label (e.g. "Global", "Production")."""

    precedence: int
    """Rank used to order sources; higher wins."""

    content: str
    """Raw YAML or JSON text."""


class MergeResult(_pydantic.BaseModel):
    """Merged document plus provenance ledger."""

    model_config = _pydantic.ConfigDict(frozen=True)

    merged_content: str
    """Merged document in the requested output format."""

    provenance: dict[str, prov.ProvenanceRecord]
    """Ledger path -> record for every leaf set by a non-baseline scope."""

    def to_api(self) -> dict[str, _typing.Any]:
        """Serialize as {mergedContent, provenance} for an API boundary."""
        return {
            "mergedContent": self.merged_content,
            "provenance": {path: record.to_api() for path, record in self.provenance.items()},
        }


class ParameterMerger:
    """
    Merges parameter documents with precedence-based replacement.

    Mappings merge recursively, everything else (scalars, nulls, sequences)
    is replaced by the higher-precedence value. Instances hold no state and
    may be shared between threads.
    """

    def merge(
        self,
        sources: _typing.Iterable[str],
        options: MergeOptions | None = None,
    ) -> str:
        """
        Merge raw documents in the given order.

        The first document has the lowest precedence. No sorting happens:
        callers pass documents already in ascending precedence.

        Args:
            sources: Raw YAML or JSON documents.
            options: Output options. Defaults to YAML output.

        Returns:
            The merged document.

        Raises:
            FormatError: If any document is malformed, or JSON output meets
                a non-finite float.
        """
        options = options or MergeOptions()

        parsed = [
            codec.parse(text, index=index, strict_root=options.strict_root)
            for index, text in enumerate(sources)
        ]
        _logger.debug("Merging %d parameter documents", len(parsed))

        merged = engine.fold(parsed)
        return codec.serialize(
            merged,
            options.output_format,
            include_comments=options.include_comments,
        )

    def merge_with_provenance(
        self,
        sources: _typing.Iterable[ParameterSource],
        options: MergeOptions | None = None,
    ) -> MergeResult:
        """
        Merge scoped documents and record where each leaf came from.

        Sources are sorted by precedence (stable, so equal precedences keep
        their input order) before folding.

        Args:
            sources: Scoped parameter documents, any order.
            options: Output options. Defaults to YAML output.

        Returns:
            MergeResult with the merged document and the provenance ledger.

        Raises:
            FormatError: If any document is malformed, or JSON output meets
                a non-finite float. Parse errors name the failing
                input index (position in sources) and scope.
        """
        options = options or MergeOptions()

        # Keep each source's input position for error reporting
        ordered = sorted(enumerate(sources), key=lambda pair: pair[1].precedence)
        layers = [
            prov.ProvenanceLayer(
                scope_name=source.scope_name,
                precedence=source.precedence,
                parameters=codec.parse(
                    source.content,
                    index=index,
                    scope_name=source.scope_name,
                    strict_root=options.strict_root,
                ),
            )
            for index, source in ordered
        ]
        _logger.debug(
            "Merging %d scopes with provenance: %s",
            len(layers),
            ", ".join(layer.scope_name for layer in layers),
        )

        merged, ledger = prov.fold_with_provenance(layers)
        content = codec.serialize(
            merged,
            options.output_format,
            include_comments=options.include_comments,
        )
        return MergeResult(merged_content=content, provenance=ledger)


_default_merger = ParameterMerger()


def merge(
    sources: _typing.Iterable[str],
    options: MergeOptions | None = None,
) -> str:
    """Merge raw documents with the shared default merger."""
    return _default_merger.merge(sources, options)


def merge_with_provenance(
    sources: _typing.Iterable[ParameterSource],
    options: MergeOptions | None = None,
) -> MergeResult:
    """Merge scoped documents with provenance using the shared default merger."""
    return _default_merger.merge_with_provenance(sources, options)
