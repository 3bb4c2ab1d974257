"""Sequential batch transforms over directory trees and file lists."""

import logging
from pathlib import Path
from typing import Callable, List, Optional

from ..constants import FORMAT_ERROR_MSG
from ..file_manager import relative_output_path
from .codec import Codec, PathLike
from .models import (
    AudioFormat, CodecError, ErrorKind, FileOperation, TransformResult,
    open_error_msg,
)

logger = logging.getLogger("Streamwave.Batch")

Transform = Callable[[Path, Path], TransformResult]
Progress = Callable[[FileOperation, int, int], None]


def resolve_operations(input_path: PathLike) -> List[FileOperation]:
    """Expand an input into pending operations.

    A directory yields every file beneath it, sorted. A regular file is read
    as a newline-delimited list of paths; blank lines are skipped.
    """
    path = Path(input_path)
    if path.is_dir():
        return _operations_from_folder(path)
    return _operations_from_file(path)


def _operations_from_folder(path: Path) -> List[FileOperation]:
    return [FileOperation(path=p) for p in sorted(path.rglob("*")) if not p.is_dir()]


def _operations_from_file(path: Path) -> List[FileOperation]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Could not read file list {path}: {e}")
        raise CodecError(ErrorKind.OPEN, open_error_msg(path)) from e

    return [FileOperation(path=Path(line)) for line in lines if line.strip()]


def _resolve_output_root(input_path: Path, output_root: Optional[PathLike]) -> Path:
    root = Path(output_root) if output_root else input_path

    if not root.exists():
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CodecError(ErrorKind.OPEN, open_error_msg(root)) from e

    if not root.is_dir():
        raise CodecError(ErrorKind.OPEN, open_error_msg(root))
    return root


def run_batch(input_path: PathLike, transform: Transform,
              output_root: Optional[PathLike] = None,
              progress: Optional[Progress] = None) -> List[FileOperation]:
    """Apply `transform(source, output)` to every resolved file in order.

    Each item's result is recorded on its FileOperation; a failing item
    never stops the batch. `progress(op, position, total)` is called after
    each item. Raises CodecError(OPEN) only when the input or
    the output root is unusable.
    """
    source = Path(input_path)
    if not source.exists():
        raise CodecError(ErrorKind.OPEN, open_error_msg(source))

    root = _resolve_output_root(source, output_root)
    operations = resolve_operations(source)
    total = len(operations)
    logger.info(f"Processing {total} file(s) from {source} into {root}")

    for position, op in enumerate(operations, start=1):
        destination = root / relative_output_path(op.path, source)
        try:
            result = transform(op.path, destination)
        except Exception as e:
            logger.exception(f"Unexpected error while processing {op.path}")
            op.mark_failed(str(e), e.kind if isinstance(e, CodecError) else None)
        else:
            op.apply(result)
            if op.failed:
                logger.warning(f"{op.path}: {op.error}")
            else:
                logger.debug(f"{op.path}: ok")

        if progress:
            progress(op, position, total)

    return operations


def encode_all(input_path: PathLike, fmt: AudioFormat, output_root: Optional[PathLike] = None,
               codec: Optional[Codec] = None, progress: Optional[Progress] = None) -> List[FileOperation]:
    fmt = AudioFormat(fmt)
    if fmt == AudioFormat.NONE:
        raise CodecError(ErrorKind.FORMAT, FORMAT_ERROR_MSG)

    codec = codec or Codec()
    return run_batch(input_path, lambda src, dst: codec.encode_file(src, fmt, dst), output_root, progress)


def decode_all(input_path: PathLike, output_root: Optional[PathLike] = None,
               codec: Optional[Codec] = None, progress: Optional[Progress] = None) -> List[FileOperation]:
    codec = codec or Codec()
    return run_batch(input_path, codec.decode_file, output_root, progress)
