"""Scratch workspace holding the input and output files of one conversion.

Each slot is named after a fresh uuid4, so concurrent conversions sharing
the same work directory never collide and need no locking.
"""

import logging
import os
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Union

from videonote.core.logging import log_warning

logger = logging.getLogger(__name__)

VIDEO_SUFFIX = ".mp4"


class Workspace:
    """Pair of uniquely named temp paths owned by a single conversion."""

    def __init__(self, input_path: Path, output_path: Path):
        self.input_path = input_path
        self.output_path = output_path
        self._released = False

    @classmethod
    def acquire(cls, work_dir: Union[str, Path]) -> "Workspace":
        """Allocate two fresh slot paths under work_dir.

        Nothing is written to either path.
        """
        base = Path(work_dir)
        base.mkdir(parents=True, exist_ok=True)
        return cls(
            input_path=base / f"{uuid.uuid4().hex}{VIDEO_SUFFIX}",
            output_path=base / f"{uuid.uuid4().hex}{VIDEO_SUFFIX}",
        )

    @property
    def paths(self) -> tuple[Path, Path]:
        return self.input_path, self.output_path

    @property
    def released(self) -> bool:
        return self._released

    def write_input(self, data: bytes) -> None:
        self.input_path.write_bytes(data)

    def release(self) -> bool:
        """Remove both slots if present.

        Safe to call more than once and on slots that were removed
        externally. Removal errors are logged as cleanup failures and never
        raised, so they cannot mask the outcome of the conversion.

        Returns:
            True if every slot is gone afterwards
        """
        if self._released:
            return True
        self._released = True

        clean = True
        for path in self.paths:
            try:
                os.remove(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                clean = False
                log_warning(
                    logger,
                    "CleanupFailed: could not remove workspace file",
                    path=str(path),
                    error=str(e),
                )
        return clean


@asynccontextmanager
async def workspace_scope(work_dir: Union[str, Path]) -> AsyncIterator[Workspace]:
    """Acquire a workspace and release it on every exit path.

    Cancellation and exceptions raised inside the block still run the
    release before propagating.
    """
    workspace = Workspace.acquire(work_dir)
    try:
        yield workspace
    finally:
        workspace.release()
