"""mulawkit CLI entry point.

Usage:
    mulawkit convert input.wav [--output out.ulaw] [--wav] [--strict]
    mulawkit info input.wav
    mulawkit decode input.ulaw [--output out.wav]
    mulawkit init [--output mulawkit.yaml]
    mulawkit serve [--config mulawkit.yaml]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from mulawkit.core.errors import ConversionError


def _load_config(args: argparse.Namespace):
    from mulawkit.config import ConverterConfig, load_config

    config_path = getattr(args, "config", None)
    if config_path and not Path(config_path).exists():
        logger.error(f"Config file not found: {config_path}")
        sys.exit(1)
    config = load_config(config_path) if config_path else ConverterConfig()

    # Configure logging
    logger.remove()
    logger.add(sys.stderr, level=config.logging.level)
    return config


def _read_input(path: str) -> bytes:
    input_path = Path(path)
    if not input_path.exists():
        logger.error(f"Input file not found: {input_path}")
        sys.exit(1)
    return input_path.read_bytes()


class _ProgressPrinter:
    """Writes a percentage to stderr whenever it changes."""

    def __init__(self) -> None:
        self._last = -1

    def __call__(self, percent: int) -> None:
        if percent != self._last:
            self._last = percent
            sys.stderr.write(f"\rEncoding: {percent:3d}%")
            if percent == 100:
                sys.stderr.write("\n")
            sys.stderr.flush()


def cmd_convert(args: argparse.Namespace) -> None:
    """Convert a WAV file to mu-law."""
    config = _load_config(args)
    if args.container:
        config.output.container = args.container
    if args.strict:
        config.conversion.strict_fmt_chunk = True

    data = _read_input(args.input)
    input_path = Path(args.input)
    output = Path(args.output) if args.output else input_path.with_name(input_path.stem + config.output.suffix)

    from mulawkit.converter import convert

    on_progress = None if args.quiet else _ProgressPrinter()
    try:
        result = convert(data, config, on_progress=on_progress)
    except ConversionError as e:
        logger.error(f"Conversion failed: {e}")
        sys.exit(1)

    payload = result.as_wav() if config.output.container == "wav" else result.encoded
    output.write_bytes(payload)
    print(f"Written {len(payload)} bytes to: {output}")


def cmd_info(args: argparse.Namespace) -> None:
    """Show the header details of a WAV file and whether it can be converted."""
    _load_config(args)
    data = _read_input(args.input)

    from mulawkit.audio.validation import find_problems
    from mulawkit.audio.wav import parse_wav_header
    from mulawkit.core.models import AudioMetadata

    try:
        info = parse_wav_header(data)
    except ConversionError as e:
        logger.error(f"Error reading WAV file: {e}")
        sys.exit(1)

    meta = AudioMetadata.from_header(info)
    print("\nFile Information:")
    print("=" * 40)
    print(f"  {'Bit Rate:':<14} {meta.bit_rate} bps")
    print(f"  {'Channels:':<14} {meta.channels}")
    print(f"  {'Sample Rate:':<14} {meta.sample_rate} Hz")
    print(f"  {'Sample Size:':<14} {meta.sample_size} bit")
    print(f"  {'Duration:':<14} {meta.duration_seconds:.2f} s")
    print(f"  {'File Size:':<14} {meta.file_size} bytes")

    problems = find_problems(info, strict=args.strict)
    if problems:
        print("\nCannot convert:")
        for problem in problems:
            print(f"  - {problem.reason}: {problem}")
        print()
        sys.exit(1)
    print(f"\nConvertible: {info.output_length} mu-law samples at 8000 Hz")
    print()


def cmd_decode(args: argparse.Namespace) -> None:
    """Expand mu-law audio (raw or WAV-wrapped) into a 16-bit PCM WAV file."""
    _load_config(args)
    data = _read_input(args.input)

    from mulawkit.audio.wav import WAVE_FORMAT_MULAW, parse_wav_header
    from mulawkit.converter import decode_to_wav

    if data[:4] == b"RIFF":
        try:
            info = parse_wav_header(data)
        except ConversionError as e:
            logger.error(f"Error reading WAV file: {e}")
            sys.exit(1)
        if info.audio_format != WAVE_FORMAT_MULAW:
            logger.error(f"Not a mu-law WAV file (format tag {info.audio_format})")
            sys.exit(1)
        data = data[info.data_offset:info.data_offset + info.data_size]

    input_path = Path(args.input)
    output = Path(args.output) if args.output else input_path.with_name(f"{input_path.stem}.pcm.wav")
    output.write_bytes(decode_to_wav(data))
    print(f"Decoded {len(data)} samples to: {output}")


def cmd_init(args: argparse.Namespace) -> None:
    """Generate a starter configuration file."""
    output = Path(args.output)

    if output.exists() and not args.force:
        logger.error(f"File already exists: {output}. Use --force to overwrite.")
        sys.exit(1)

    from mulawkit.config import DEFAULT_CONFIG_YAML

    output.write_text(DEFAULT_CONFIG_YAML)
    print(f"Configuration written to: {output}")


def cmd_serve(args: argparse.Namespace) -> None:
    """Run the HTTP conversion server."""
    config = _load_config(args)

    from mulawkit.server import run_server

    logger.info(f"mulawkit server listening on {args.host or config.server.host}:{args.port or config.server.port}")
    run_server(config, host=args.host, port=args.port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mulawkit",
        description="mulawkit - convert 16-bit PCM WAV files to 8 kHz G.711 mu-law",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # `mulawkit convert`
    convert_parser = subparsers.add_parser("convert", help="Convert a WAV file to mu-law")
    convert_parser.add_argument("input", help="Path to a 16-bit PCM WAV file")
    convert_parser.add_argument("--output", "-o", help="Output path (default: input name + .ulaw or .ulaw.wav)")
    container = convert_parser.add_mutually_exclusive_group()
    container.add_argument(
        "--wav", dest="container", action="store_const", const="wav",
        help="Wrap the output in a playable WAV header",
    )
    container.add_argument(
        "--raw", dest="container", action="store_const", const="raw",
        help="Write headerless mu-law samples",
    )
    convert_parser.add_argument("--strict", action="store_true", help="Reject non-canonical fmt chunks")
    convert_parser.add_argument("--quiet", "-q", action="store_true", help="Do not print progress")
    convert_parser.add_argument("--config", "-c", help="Path to a YAML config file")

    # `mulawkit info`
    info_parser = subparsers.add_parser("info", help="Show WAV file information")
    info_parser.add_argument("input", help="Path to a WAV file")
    info_parser.add_argument("--strict", action="store_true", help="Apply strict validation")

    # `mulawkit decode`
    decode_parser = subparsers.add_parser("decode", help="Decode mu-law audio to a PCM WAV file")
    decode_parser.add_argument("input", help="Raw .ulaw file or mu-law WAV file")
    decode_parser.add_argument("--output", "-o", help="Output path (default: input name + .pcm.wav)")

    # `mulawkit init`
    init_parser = subparsers.add_parser("init", help="Generate a starter config file")
    init_parser.add_argument(
        "--output", "-o",
        default="mulawkit.yaml",
        help="Output file path (default: mulawkit.yaml)",
    )
    init_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Overwrite existing file",
    )

    # `mulawkit serve`
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP conversion server")
    serve_parser.add_argument("--config", "-c", help="Path to a YAML config file")
    serve_parser.add_argument("--host", help="Override the listen host")
    serve_parser.add_argument("--port", type=int, help="Override the listen port")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "convert":
        cmd_convert(args)
    elif args.command == "info":
        cmd_info(args)
    elif args.command == "decode":
        cmd_decode(args)
    elif args.command == "init":
        cmd_init(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
