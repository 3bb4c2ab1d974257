"""File management utilities for Streamwave."""

import errno
import os
import random
import shutil
import logging
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from .constants import TEMP_NAME_CHARS, TEMP_NAME_LENGTH

logger = logging.getLogger("Streamwave.Files")


class TempPathFactory:
    """Generates unique staging paths in a temp directory.

    Each factory owns its random generator, so nothing is shared process-wide.
    """

    def __init__(self, rng: Optional[random.Random] = None, directory: Optional[Path] = None,
                 length: int = TEMP_NAME_LENGTH):
        self.rng = rng or random.Random()
        self.directory = Path(directory) if directory else Path(tempfile.gettempdir())
        self.length = length

    def random_name(self) -> str:
        return "".join(self.rng.choice(TEMP_NAME_CHARS) for _ in range(self.length))

    def new_path(self) -> Path:
        path = self.directory / self.random_name()
        while path.exists():
            path = self.directory / self.random_name()
        return path


class StagedFile:
    """A temp file that is deleted unless it has been moved into place."""

    def __init__(self, path: Path):
        self.path = path
        self.committed = False

    def discard(self) -> None:
        if self.committed:
            return
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove temporary file {self.path}: {e}")


class FileManager:
    """Handles staging and final placement of transformed files."""

    def __init__(self, temp_paths: Optional[TempPathFactory] = None):
        self.temp_paths = temp_paths or TempPathFactory()

    @contextmanager
    def staged(self) -> Iterator[StagedFile]:
        """Yield a staging file; it is removed on exit unless committed."""
        staged = StagedFile(self.temp_paths.new_path())
        try:
            yield staged
        finally:
            staged.discard()

    @contextmanager
    def open_staged(self, staged: StagedFile) -> Iterator[BinaryIO]:
        # "xb" refuses to clobber a file created by another process since new_path()
        with open(staged.path, "xb") as f:
            yield f

    @staticmethod
    def remove_existing(path: Path) -> None:
        """Remove a pre-existing destination; raises OSError on failure."""
        if path.exists() or path.is_symlink():
            path.unlink()

    @staticmethod
    def ensure_parent(path: Path) -> None:
        if str(path.parent) not in ("", "."):
            path.parent.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def move_into_place(staged: StagedFile, destination: Path) -> None:
        """Atomically replace destination with the staged file."""
        try:
            os.replace(staged.path, destination)
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise
            # Temp dir lives on another filesystem; copy beside the target, then swap
            sibling = destination.with_name(f".{destination.name}.{staged.path.name}")
            try:
                shutil.copyfile(staged.path, sibling)
                os.replace(sibling, destination)
            finally:
                if sibling.exists():
                    sibling.unlink()
            staged.committed = True
            try:
                staged.path.unlink()
            except OSError as cleanup_error:
                logger.warning(f"Could not remove temporary file {staged.path}: {cleanup_error}")
            return
        staged.committed = True


def relative_output_path(path: Path, directory: Path) -> Path:
    """Path of `path` relative to `directory`, or just its filename when unrelated.

    Symlinks are not followed, so a linked file keeps its place in the tree.
    """
    path = Path(path)
    try:
        relative = path.relative_to(directory)
    except ValueError:
        try:
            relative = Path(os.path.abspath(path)).relative_to(os.path.abspath(directory))
        except ValueError:
            return Path(path.name)
    if str(relative) in ("", "."):
        return Path(path.name)
    return relative
