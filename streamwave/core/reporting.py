import os
import logging
from pathlib import Path
from typing import Iterable, Optional, TextIO

from ..constants import FAIL_MSG, INDENT_LEVEL_1, INDENT_LEVEL_2
from .codec import Codec
from .models import (
    AudioFormat, BatchSummary, CodecError, ErrorKind, FileOperation,
    eof_error_msg, open_error_msg,
)

logger = logging.getLogger("Streamwave.Reporting")


def print_formats(input_path: Optional[os.PathLike], output: TextIO,
                  codec: Optional[Codec] = None) -> None:
    """Write the detected format of every file under a directory.

    Directories are listed with one level of indentation, files with two as
    `<filename> <format>`, or `<filename> failed!` when unreadable.
    """
    codec = codec or Codec()
    directory = Path(input_path) if input_path else Path.cwd()

    if not directory.is_dir():
        raise CodecError(ErrorKind.OPEN, open_error_msg(directory))

    output.write(f"{directory}\n")
    for entry in sorted(directory.rglob("*")):
        if entry.is_dir():
            output.write(f"{INDENT_LEVEL_1}{entry}\n")
            continue

        result = codec.detect_file(entry)
        label = result.format.value if result.ok else FAIL_MSG
        output.write(f"{INDENT_LEVEL_2}{entry.name} {label}\n")


def print_header_source(input_path: os.PathLike, output: TextIO,
                        codec: Optional[Codec] = None) -> None:
    """Dump the detected header of a file as one hex literal per line.

    Used when adding or checking entries of the header table.
    """
    codec = codec or Codec()
    path = Path(input_path)

    try:
        f = open(path, "rb")
    except OSError:
        output.write(f"{open_error_msg(path)}\n")
        return

    with f:
        fmt = codec.detect(f)
        if fmt == AudioFormat.NONE:
            output.write(f"{fmt.value}\n")
            return

        _, length = codec.registry.signature_for(fmt)
        header = f.read(length)

    if len(header) < length:
        output.write(f"{eof_error_msg(path)}\n")
        return

    for byte in header:
        output.write(f"0x{byte:02x},\n")


class BatchReporter:
    """Prints per-file batch outcomes and a closing summary."""

    def __init__(self, console):
        self.console = console

    def print_operations(self, operations: Iterable[FileOperation]) -> BatchSummary:
        operations = list(operations)
        for op in operations:
            self.console.operation(op)

        summary = BatchSummary.from_operations(operations)
        self.console.summary(summary)
        return summary
