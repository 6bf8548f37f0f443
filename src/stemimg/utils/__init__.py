#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/utils/__init__.py
"""Utility modules for the stemimg package.

This package contains the substitution engine, artifact persistence and the
dependency helpers used by the rendering engines.
"""

from stemimg.utils.artifacts import ArtifactRecord, ArtifactStore, EmbeddedArtifact, normalize_system_path
from stemimg.utils.substitutions import apply_subs, resolve_pass_subs, resolve_subs

__all__ = [
    "ArtifactRecord",
    "ArtifactStore",
    "EmbeddedArtifact",
    "apply_subs",
    "normalize_system_path",
    "resolve_pass_subs",
    "resolve_subs",
]
