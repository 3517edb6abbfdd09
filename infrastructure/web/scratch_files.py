# infrastructure/web/scratch_files.py
# Scoped scratch file pairs for the trim route.
# Both files are released on every exit path: success, exception or timeout.

import logging
import os
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

logger = logging.getLogger(__name__)


@dataclass
class ScratchPair:
    input_path: str
    output_path: str


def safe_delete(path: str) -> None:
    """Delete a file without raising if it does not exist."""
    try:
        if path and os.path.exists(path):
            os.unlink(path)
    except OSError as e:
        logger.warning("Could not delete %s: %s", path, e)


@contextmanager
def scratch_pair(scratch_dir: str, extension: str) -> Iterator[ScratchPair]:
    """
    Reserve uniquely named input/output paths inside *scratch_dir*.

    The directory is created recursively if absent. Neither file is created
    here; whatever exists at either path when the block exits is removed.
    """
    os.makedirs(scratch_dir, exist_ok=True)
    pair = ScratchPair(
        input_path=os.path.join(scratch_dir, f"input-{uuid.uuid4()}.{extension}"),
        output_path=os.path.join(scratch_dir, f"output-{uuid.uuid4()}.{extension}"),
    )
    try:
        yield pair
    finally:
        safe_delete(pair.input_path)
        safe_delete(pair.output_path)
