"""Resolve declared mappings into concrete file copy instructions.

A mapping whose source is a file yields one instruction. A mapping whose
source is a directory yields one instruction per file beneath it, skipping
hidden files and anything matching the mapping's exclusion globs.

Exclusion globs are matched against the path relative to the *source root*
(the workspace), not relative to the mapped directory, so a pattern like
``openapi/internal/*`` works as well as ``**/*.internal.yaml``.
"""

from collections.abc import Iterable, Iterator
from pathlib import Path

import structlog
from wcmatch import glob

from spec_sync.config.settings import SourceMapping
from spec_sync.exceptions import ConfigurationError
from spec_sync.models.domain import CopyInstruction

log = structlog.get_logger(__name__)


def matches_glob(path: str, pattern: str) -> bool:
    """Match a POSIX relative path against a glob pattern.

    ``*`` stays within one path segment and ``**`` matches zero or more
    directories, so ``openapi/*.yaml`` leaves ``openapi/a/x.yaml`` alone while
    ``**/*.yaml`` matches ``api.yaml``. Matching is case-sensitive and
    wildcards do not match a leading dot.
    """
    return glob.globmatch(path, pattern, flags=glob.GLOBSTAR | glob.CASE)


def is_excluded(relative_path: str, patterns: Iterable[str]) -> bool:
    """Return True if any exclusion pattern matches ``relative_path``."""
    return any(matches_glob(relative_path, pattern) for pattern in patterns)


def _iter_files(directory: Path) -> Iterator[Path]:
    """Yield non-hidden files under ``directory`` in a stable order."""
    for path in sorted(directory.rglob("*")):
        if not path.is_file():
            continue
        if any(part.startswith(".") for part in path.relative_to(directory).parts):
            continue
        yield path


def _inside(root: Path, relative: str, label: str) -> Path:
    """Join ``relative`` onto ``root``, refusing paths that escape it."""
    path = (root / relative).resolve()
    if not path.is_relative_to(root):
        raise ConfigurationError(f"Mapping {label} path {relative} points outside of {root}")
    return path


def resolve_mappings(
    mappings: Iterable[SourceMapping],
    source_root: Path,
    target_root: Path,
) -> list[CopyInstruction]:
    """Expand mappings into file copy instructions.

    Args:
        mappings: Declared mappings, in order
        source_root: Root the ``from`` paths and exclusion globs are relative to
        target_root: Root the ``to`` paths are relative to

    Returns:
        Copy instructions in mapping order, then path order

    Raises:
        ConfigurationError: If a source path does not exist or a path escapes
            its root
    """
    source_root = source_root.resolve()
    target_root = target_root.resolve()
    instructions: list[CopyInstruction] = []

    for mapping in mappings:
        source = _inside(source_root, mapping.source, "source")
        destination = _inside(target_root, mapping.destination, "destination")

        if not source.exists():
            raise ConfigurationError(f"Source path {mapping.source} not found")

        if source.is_dir():
            log.info("syncing_directory", source=mapping.source, destination=mapping.destination)
            for file in _iter_files(source):
                relative = file.relative_to(source_root).as_posix()
                if is_excluded(relative, mapping.exclude):
                    log.info("skipping_excluded_file", path=relative)
                    continue
                instructions.append(
                    CopyInstruction(
                        source=file,
                        destination=destination / file.relative_to(source),
                        relative=relative,
                    )
                )
        else:
            log.info("syncing_file", source=mapping.source, destination=mapping.destination)
            instructions.append(
                CopyInstruction(
                    source=source,
                    destination=destination,
                    relative=source.relative_to(source_root).as_posix(),
                )
            )

    return instructions
