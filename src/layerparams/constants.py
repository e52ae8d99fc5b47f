"""
Shared constants for layerparams.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

# Integer range
INT64_MIN = -(2**63)
"""Smallest integer kept exact; anything below widens to float."""

INT64_MAX = 2**63 - 1
"""Largest integer kept exact; anything above widens to float."""

# Provenance paths
PATH_SEPARATOR = "."
"""Separator used to join mapping keys into provenance ledger paths."""

# Scope store layout
PARAMETERS_DIRNAME = "parameters"
"""Directory under the data dir that holds per-configuration parameter trees."""

PARAMETERS_FILENAME = "parameters.yaml"
"""File name of a single scope's parameter document."""

DEFAULT_SCOPE_TYPE = "Default"
"""Scope type that applies to every node (lowest precedence)."""

NODE_SCOPE_TYPE = "Node"
"""Scope type keyed by node FQDN (highest precedence)."""

DEFAULT_SCOPE_PRECEDENCE = 0
"""Default precedence for the Default scope."""

NODE_SCOPE_PRECEDENCE = 1000
"""Default precedence for the Node scope."""

DEFAULT_DATA_DIR = "data"
"""Default data directory for the scope store."""

MAX_NESTING_DEPTH = 100
"""Deepest mapping/sequence nesting accepted in a parameter document."""
