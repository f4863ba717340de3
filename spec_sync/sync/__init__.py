"""Working-tree mutation: mapping resolution, file copying, spec generation."""

from spec_sync.sync.copier import apply_copies
from spec_sync.sync.generator import SpecGenerator
from spec_sync.sync.mappings import is_excluded, resolve_mappings

__all__ = [
    "SpecGenerator",
    "apply_copies",
    "is_excluded",
    "resolve_mappings",
]
