"""Write resolved copy instructions into the target working tree."""

import shutil
from collections.abc import Iterable

import structlog

from spec_sync.models.domain import CopyInstruction

log = structlog.get_logger(__name__)


def apply_copies(instructions: Iterable[CopyInstruction]) -> int:
    """Copy every instruction's source file over its destination.

    Parent directories are created as needed. Only file contents are copied;
    the target repository decides modes and ownership.

    Returns:
        Number of files written
    """
    count = 0
    for instruction in instructions:
        instruction.destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(instruction.source, instruction.destination)
        count += 1
    log.info("files_copied", count=count)
    return count
