"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
These are wire-format constraints and implementation limits.

For configurable values, see models.py (ResolutionConfig, LogsConfig, etc.).
"""

# =============================================================================
# Wire format
# =============================================================================

UINT32_MAX = 2**32 - 1
"""Upper bound of metadata tokens."""

UINT64_MAX = 2**64 - 1
"""Upper bound of function, module and assembly identifiers."""

# =============================================================================
# Limits
# =============================================================================

GENERIC_DEPTH_DEFAULT = 32
"""Default for resolution.max_generic_depth."""

GENERIC_DEPTH_MAX = 256
"""Hard cap for resolution.max_generic_depth."""

DESCRIPTOR_MAX_DEPTH = 64
"""Nesting limit when encoding or decoding type descriptors."""

MANIFEST_INDENT_MAX = 8
"""Hard cap for manifest.indent."""

# =============================================================================
# Locations
# =============================================================================

PROJECT_DIR_NAME = ".jitlog"
"""Per-project directory holding config.yaml."""
