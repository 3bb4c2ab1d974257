import argparse
import sys
import logging
from pathlib import Path
from typing import Optional, List

from .constants import FORMAT_ERROR_MSG
from .core.batch import decode_all, encode_all
from .core.config import build_codec, load_config
from .core.console import console
from .core.models import AudioFormat, CodecError, ErrorKind
from .core.reporting import BatchReporter, print_formats, print_header_source
from .utils import setup_logging

# Handlers are attached once the config is loaded
logger = logging.getLogger("Streamwave")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BAD_INPUT = 2

FORMAT_CHOICES = {
    "sfx": AudioFormat.SFX,
    "vo": AudioFormat.VO,
    "music": AudioFormat.VO,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="streamwave",
        description="Strip or add the headers legacy game audio files carry.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    parser.add_argument("--config", help="Path to a YAML config file.")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    decode_parser = subparsers.add_parser("decode", help="Strip headers (WAV/MP3 out)")
    decode_parser.add_argument("input", help="Input file, directory, or file list (with --all)")
    decode_parser.add_argument("-o", "--out", help="Output file, or output directory with --all")
    decode_parser.add_argument("-a", "--all", action="store_true", help="Process every file in a directory or list")

    encode_parser = subparsers.add_parser("encode", help="Add headers for a game format")
    encode_parser.add_argument("input", help="Input file, directory, or file list (with --all)")
    encode_parser.add_argument("-f", "--format", required=True, choices=sorted(FORMAT_CHOICES),
                               help="Target format (music is stored like vo)")
    encode_parser.add_argument("-o", "--out", help="Output file, or output directory with --all")
    encode_parser.add_argument("-a", "--all", action="store_true", help="Process every file in a directory or list")

    list_parser = subparsers.add_parser("list", help="List files & formats in a directory")
    list_parser.add_argument("input", nargs="?", help="Directory to scan (default: current directory)")
    list_parser.add_argument("-o", "--out", help="Write the listing to this file instead of stdout")

    header_parser = subparsers.add_parser("header", help="Dump a file's header bytes as hex literals")
    header_parser.add_argument("input", help="Input file")

    return parser


def to_audio_format(name: str) -> AudioFormat:
    try:
        return FORMAT_CHOICES[name.lower()]
    except KeyError:
        raise CodecError(ErrorKind.FORMAT, FORMAT_ERROR_MSG)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_BAD_INPUT

    try:
        config_context = load_config(args.config)
    except ValueError as e:
        console.error_panel(str(e), title="Configuration")
        return EXIT_BAD_INPUT
    log_config = config_context.logging

    debug_mode = args.verbose or log_config.debug
    setup_logging(log_dir=log_config.log_dir, debug=debug_mode, output_mode=log_config.output_mode)
    try:
        console.configure(output_mode=log_config.output_mode, debug=debug_mode)
    except ValueError as e:
        console.error_panel(str(e), title="Configuration")
        return EXIT_BAD_INPUT

    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))

    sys.excepthook = handle_exception

    try:
        codec = build_codec(config_context)
    except ValueError as e:
        console.error_panel(str(e), title="Configuration")
        return EXIT_BAD_INPUT

    try:
        if args.command == "decode":
            return _run_decode(codec, args)
        if args.command == "encode":
            return _run_encode(codec, args)
        if args.command == "list":
            return _run_list(codec, args)
        if args.command == "header":
            print_header_source(Path(args.input), sys.stdout, codec=codec)
            return EXIT_OK
    except CodecError as e:
        logger.error(e.message)
        return EXIT_FAILURE

    parser.print_help()
    return EXIT_BAD_INPUT


def _run_decode(codec, args) -> int:
    if args.all:
        with console.batch_progress(f"Decoding {args.input}") as progress:
            operations = decode_all(args.input, args.out, codec=codec, progress=progress)
        summary = BatchReporter(console).print_operations(operations)
        return EXIT_FAILURE if summary.failed else EXIT_OK

    result = codec.decode_file(args.input, args.out).raise_for_error()
    if result.output is None:
        console.untouched(result.source)
    else:
        console.transformed("decoded", result.source, result.output, result.format)
    return EXIT_OK


def _run_encode(codec, args) -> int:
    fmt = to_audio_format(args.format)

    if args.all:
        with console.batch_progress(f"Encoding {args.input} as {fmt.value}") as progress:
            operations = encode_all(args.input, fmt, args.out, codec=codec, progress=progress)
        summary = BatchReporter(console).print_operations(operations)
        return EXIT_FAILURE if summary.failed else EXIT_OK

    result = codec.encode_file(args.input, fmt, args.out).raise_for_error()
    console.transformed("encoded", result.source, result.output, result.format)
    return EXIT_OK


def _run_list(codec, args) -> int:
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            print_formats(args.input, f, codec=codec)
        logger.info(f"Listing written to {out_path}")
    else:
        print_formats(args.input, sys.stdout, codec=codec)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
