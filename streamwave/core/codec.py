"""Detection, stripping and insertion of legacy audio headers."""

import os
import shutil
import logging
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ..constants import COPY_BLOCK_SIZE, FORMAT_ERROR_MSG
from ..file_manager import FileManager, StagedFile
from .headers import DEFAULT_REGISTRY, HeaderRegistry, decode_extension, encode_extension
from .models import (
    AudioFormat, ErrorKind, TransformResult,
    open_error_msg, write_error_msg, delete_error_msg,
)

logger = logging.getLogger("Streamwave.Codec")

PathLike = Union[str, os.PathLike]


class Codec:
    """Encodes and decodes whole files against a header registry.

    Every transform is staged in a temporary file and moved over the
    destination only once fully written. Failures come back as a
    TransformResult carrying an ErrorKind; `encode` and `decode` are the
    raising variants for single-file callers.
    """

    def __init__(self, registry: Optional[HeaderRegistry] = None,
                 file_manager: Optional[FileManager] = None):
        self.registry = registry or DEFAULT_REGISTRY
        self.files = file_manager or FileManager()

    def detect(self, stream: BinaryIO) -> AudioFormat:
        """Determine the format of a stream from its leading bytes.

        Reads from the current position and restores it afterwards. A stream
        shorter than a signature never matches that signature.
        """
        position = stream.tell()
        try:
            head = stream.read(self.registry.max_signature_length())
        finally:
            stream.seek(position)

        for fmt in self.registry.formats:
            signature, _ = self.registry.signature_for(fmt)
            if head.startswith(signature):
                return fmt
        return AudioFormat.NONE

    def detect_file(self, path: PathLike) -> TransformResult:
        """Detect the format of a file; the result carries the format or an OPEN error."""
        source = Path(path)
        try:
            with open(source, "rb") as f:
                return TransformResult(source=source, format=self.detect(f))
        except OSError as e:
            logger.debug(f"Could not open {source}: {e}")
            return TransformResult.failure(source, ErrorKind.OPEN, open_error_msg(source))

    def encode_file(self, input_path: PathLike, fmt: AudioFormat,
                    output_path: Optional[PathLike] = None) -> TransformResult:
        source = Path(input_path)
        output = Path(output_path) if output_path else source
        fmt = AudioFormat(fmt)

        header, _ = self.registry.signature_for(fmt)
        if fmt == AudioFormat.NONE or not header:
            return TransformResult.failure(source, ErrorKind.FORMAT, FORMAT_ERROR_MSG, fmt)

        try:
            src = open(source, "rb")
        except OSError as e:
            logger.debug(f"Could not open {source}: {e}")
            return TransformResult.failure(source, ErrorKind.OPEN, open_error_msg(source), fmt)

        with self.files.staged() as staged:
            with src:
                failure = self._write_staged(staged, header, src, source, fmt)
            if failure:
                return failure
            return self._finalize(staged, source, output, encode_extension(fmt), fmt)

    def decode_file(self, input_path: PathLike,
                    output_path: Optional[PathLike] = None) -> TransformResult:
        source = Path(input_path)
        output = Path(output_path) if output_path else source

        try:
            src = open(source, "rb")
        except OSError as e:
            logger.debug(f"Could not open {source}: {e}")
            return TransformResult.failure(source, ErrorKind.OPEN, open_error_msg(source))

        with self.files.staged() as staged:
            with src:
                fmt = self.detect(src)
                if fmt == AudioFormat.NONE:
                    logger.debug(f"No known header in {source}, leaving it alone")
                    return TransformResult(source=source, format=fmt)

                _, length = self.registry.signature_for(fmt)
                src.seek(length, os.SEEK_CUR)
                failure = self._write_staged(staged, b"", src, source, fmt)
            if failure:
                return failure
            return self._finalize(staged, source, output, decode_extension(fmt), fmt)

    def encode(self, input_path: PathLike, fmt: AudioFormat,
               output_path: Optional[PathLike] = None) -> Optional[Path]:
        """Encode a single file, raising CodecError on failure."""
        return self.encode_file(input_path, fmt, output_path).raise_for_error().output

    def decode(self, input_path: PathLike, output_path: Optional[PathLike] = None) -> Optional[Path]:
        """Decode a single file, raising CodecError on failure.

        Returns the written path, or None when the file carried no known header.
        """
        return self.decode_file(input_path, output_path).raise_for_error().output

    def _write_staged(self, staged: StagedFile, header: bytes, src: BinaryIO,
                      source: Path, fmt: AudioFormat) -> Optional[TransformResult]:
        try:
            with self.files.open_staged(staged) as out:
                out.write(header)
                shutil.copyfileobj(src, out, COPY_BLOCK_SIZE)
        except OSError as e:
            logger.debug(f"Staging {source} into {staged.path} failed: {e}")
            return TransformResult.failure(source, ErrorKind.WRITE, write_error_msg(staged.path), fmt)
        return None

    def _finalize(self, staged: StagedFile, source: Path, output: Path,
                  extension: str, fmt: AudioFormat) -> TransformResult:
        destination = output.with_suffix(extension)

        # A differently named output is removed only after the move lands
        try:
            self.files.ensure_parent(destination)
            self.files.move_into_place(staged, destination)
        except OSError as e:
            logger.debug(f"Could not move {staged.path} to {destination}: {e}")
            return TransformResult.failure(source, ErrorKind.WRITE, write_error_msg(destination), fmt)

        if output != destination:
            try:
                self.files.remove_existing(output)
            except OSError as e:
                logger.debug(f"Could not remove {output}: {e}")
                return TransformResult.failure(source, ErrorKind.DELETE, delete_error_msg(output), fmt)

        logger.debug(f"{source} -> {destination} ({fmt.value})")
        return TransformResult(source=source, output=destination, format=fmt)


def detect(stream: BinaryIO, registry: Optional[HeaderRegistry] = None) -> AudioFormat:
    return Codec(registry).detect(stream)


def encode(input_path: PathLike, fmt: AudioFormat, output_path: Optional[PathLike] = None,
           codec: Optional[Codec] = None) -> Optional[Path]:
    return (codec or Codec()).encode(input_path, fmt, output_path)


def decode(input_path: PathLike, output_path: Optional[PathLike] = None,
           codec: Optional[Codec] = None) -> Optional[Path]:
    return (codec or Codec()).decode(input_path, output_path)
