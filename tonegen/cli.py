from __future__ import annotations

import argparse
import json
import logging
import time
from pathlib import Path
from typing import Any

from rich.console import Console

from .audio import measure_levels, read_wav
from .config import (
    BIT_DEPTHS,
    DEFAULT_AMPLITUDE,
    DEFAULT_DURATION_SECONDS,
    DEFAULT_FREQUENCY_HZ,
    DEFAULT_SAMPLE_RATE,
    MODES,
    SWEEP_CURVES,
    WAVEFORMS,
    SynthesisRequest,
    parse_frequency_list,
    parse_request,
)
from .logging_utils import configure_logging, debug_enabled, log_exception
from .presets import PRESET_NAMES, preset_request
from .render import render, render_to, suggested_filename
from .session import SynthesisSession
from .spinner import Spinner, render_error
from .wav import parse_header

_LOGGER = logging.getLogger("tonegen.cli")
_CONSOLE = Console()


def _add_request_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--mode", choices=MODES, default="single")
    parser.add_argument("--waveform", choices=WAVEFORMS, default="sine")
    parser.add_argument("--frequency", type=float, default=DEFAULT_FREQUENCY_HZ)
    parser.add_argument(
        "--frequencies",
        type=str,
        default=None,
        help='Comma-separated tone list for multi mode, e.g. "100, 250, 500"',
    )
    parser.add_argument("--start", type=float, default=20.0, help="Sweep start frequency (Hz)")
    parser.add_argument("--end", type=float, default=20000.0, help="Sweep end frequency (Hz)")
    parser.add_argument("--curve", choices=SWEEP_CURVES, default="linear")
    parser.add_argument("--amplitude", type=float, default=DEFAULT_AMPLITUDE)
    parser.add_argument("--duration", type=float, default=DEFAULT_DURATION_SECONDS)
    parser.add_argument("--sample-rate", type=int, default=DEFAULT_SAMPLE_RATE)
    parser.add_argument("--channels", type=int, default=1)
    parser.add_argument("--bit-depth", type=int, choices=BIT_DEPTHS, default=16)
    parser.add_argument("--normalize", action="store_true")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible noise")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tonegen")
    sub = parser.add_subparsers(dest="command", required=True)

    render_parser = sub.add_parser("render", help="Render a tone, mixture or sweep to WAV.")
    _add_request_arguments(render_parser)
    render_parser.add_argument("--output", type=Path, default=None)
    render_parser.add_argument(
        "--stream",
        action="store_true",
        help="Encode chunk by chunk instead of buffering the whole signal",
    )

    preset_parser = sub.add_parser("preset", help="Render a named calibration preset.")
    preset_parser.add_argument("name", choices=PRESET_NAMES)
    preset_parser.add_argument("--output", type=Path, default=None)

    sub.add_parser("presets", help="List preset names.")

    inspect_parser = sub.add_parser("inspect", help="Report the header and levels of a WAV file.")
    inspect_parser.add_argument("path", type=Path)
    inspect_parser.add_argument("--json", action="store_true", dest="as_json")

    play_parser = sub.add_parser("play", help="Play a request on the default output device.")
    _add_request_arguments(play_parser)
    return parser


def request_from_args(args: argparse.Namespace) -> SynthesisRequest:
    payload: dict[str, Any] = {
        "mode": args.mode,
        "waveform": args.waveform,
        "amplitude": args.amplitude,
        "duration_seconds": args.duration,
        "sample_rate": args.sample_rate,
        "channel_count": args.channels,
        "bit_depth": args.bit_depth,
        "normalize": args.normalize,
        "seed": args.seed,
    }
    match args.mode:
        case "single":
            payload["frequency_hz"] = args.frequency
        case "multi":
            text = args.frequencies if args.frequencies is not None else str(args.frequency)
            payload["frequencies_hz"] = parse_frequency_list(text)
        case "sweep":
            payload.update(start_hz=args.start, end_hz=args.end, curve=args.curve)
    return parse_request(payload)


def _write(request: SynthesisRequest, output: Path | None, *, stream: bool) -> Path:
    target = output or Path(suggested_filename(request))
    with Spinner(f"Rendering {target.name}"):
        if stream:
            render_to(request, target)
        else:
            render(request).save(target)
    return target


def inspect_file(path: Path) -> dict[str, Any]:
    data = path.read_bytes()
    header = parse_header(data)
    samples, _ = read_wav(data)
    levels = measure_levels(samples)
    return {
        "command": "inspect",
        "path": str(path),
        "sample_rate": header.sample_rate,
        "channel_count": header.channel_count,
        "bit_depth": header.bit_depth,
        "data_size": header.data_size,
        "frames": header.frames,
        "duration_seconds": header.duration_seconds,
        "peak": levels.peak,
        "rms": levels.rms,
    }


def _play(request: SynthesisRequest) -> None:
    session = SynthesisSession()
    with session:
        session.play(request)
        _CONSOLE.print(f"Playing {suggested_filename(request)} (Ctrl-C to stop)")
        try:
            deadline = time.monotonic() + request.duration_seconds
            while session.is_playing and time.monotonic() < deadline:
                time.sleep(0.1)
        except KeyboardInterrupt:
            _LOGGER.info("Playback interrupted")
    session.wait(timeout=1.0)


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    try:
        parser = build_parser()
        args = parser.parse_args(argv)

        if args.command == "render":
            request = request_from_args(args)
            path = _write(request, args.output, stream=args.stream)
            _CONSOLE.print(f"Wrote {path} ({request.total_frames} frames, {request.bit_depth}-bit)")
            return 0

        if args.command == "preset":
            request = preset_request(args.name)
            path = _write(request, args.output, stream=False)
            _CONSOLE.print(f"Wrote preset {args.name} to {path}")
            return 0

        if args.command == "presets":
            for name in PRESET_NAMES:
                _CONSOLE.print(name)
            return 0

        if args.command == "inspect":
            report = inspect_file(args.path)
            if args.as_json:
                print(json.dumps(report))
            else:
                for key, value in report.items():
                    _CONSOLE.print(f"{key}: {value}")
            return 0

        if args.command == "play":
            _play(request_from_args(args))
            return 0

        parser.print_help()
        return 1
    except Exception as exc:
        _LOGGER.warning("tonegen CLI failed: %s", exc, exc_info=debug_enabled())
        log_exception("tonegen CLI", exc)
        render_error("tonegen CLI", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
