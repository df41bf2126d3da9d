"""Command line front end: detect from the microphone, from a file, or serve the web API."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence, TextIO

from freq_det.detector import FreqDetector, FreqDetectorConfig
from freq_det.errors import FreqDetError, InvalidConfiguration, SilentOrDegenerateSignal
from freq_det.notes import nearest_note
from freq_det.refine import REFINEMENT_NAMES
from freq_det.spectrum import TRANSFORM_NAMES
from freq_det.window import WINDOW_NAMES

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="freq-det",
        description="Estimate the dominant frequency of fixed-size audio blocks.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        default="WARNING",
        help="Logging level.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    mic = sub.add_parser("mic", help="Detect from the default input device.")
    _add_detector_args(mic)
    mic.add_argument("--sample-rate", type=int, default=44100, help="Capture sample rate in Hz.")
    mic.add_argument("--device", default=None, help="Input device index or name (sounddevice).")
    mic.add_argument("--blocks", type=int, default=0, help="Stop after this many blocks (0 = run forever).")

    file_ = sub.add_parser("file", help="Detect per block from an audio file.")
    _add_detector_args(file_)
    file_.add_argument("path", type=Path, help="Audio file readable by soundfile (wav, flac, ogg, ...).")

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser


def _add_detector_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--window-size", type=int, default=4096, help="Samples per analysis block.")
    parser.add_argument("--min-hz", type=float, default=20.0, help="Lowest frequency searched.")
    parser.add_argument("--max-hz", type=float, default=None, help="Highest frequency searched (default Nyquist).")
    parser.add_argument("--noise-floor", type=float, default=1e-4, help="Minimum peak amplitude, [-1,1] scale.")
    parser.add_argument("--window", choices=WINDOW_NAMES, default="hann")
    parser.add_argument("--refinement", choices=REFINEMENT_NAMES, default="parabolic_log")
    parser.add_argument("--transform", choices=TRANSFORM_NAMES, default="fft")
    parser.add_argument("--notes", action="store_true", help="Also print the nearest note and cents offset.")


def make_detector(args: argparse.Namespace, sample_rate: int) -> FreqDetector:
    return FreqDetector(
        FreqDetectorConfig(
            sample_rate=sample_rate,
            window_size=args.window_size,
            min_hz=args.min_hz,
            max_hz=args.max_hz,
            noise_floor=args.noise_floor,
            window=args.window,
            refinement=args.refinement,
            transform=args.transform,
        )
    )


def format_estimate(hz: float | None, *, notes: bool) -> str:
    if hz is None:
        return "-"
    text = f"{hz:.2f}"
    if notes:
        reading = nearest_note(hz)
        if reading is not None:
            text += f"\t{reading.name}\t{reading.cents:+.1f}c"
    return text


def run_file(args: argparse.Namespace, out: TextIO) -> int:
    from freq_det.audio_file import decode_audio, detect_blocks

    try:
        audio, sample_rate = decode_audio(args.path)
    except (OSError, RuntimeError, ValueError) as exc:
        logger.error("Unable to read %s: %s", args.path, exc)
        return 1

    detector = make_detector(args, sample_rate)
    results = detect_blocks(detector, audio)
    if not results:
        logger.warning("%s is shorter than one %d-sample block", args.path, detector.window_size)
    for t, hz in results:
        out.write(f"{t:.3f}\t{format_estimate(hz, notes=args.notes)}\n")
    return 0


def run_mic(args: argparse.Namespace, out: TextIO) -> int:
    try:
        import sounddevice as sd

        from freq_det.audio import AudioInput, AudioInputConfig
    except OSError as exc:
        logger.error("Audio capture unavailable: %s", exc)
        return 1

    device: int | str | None = args.device
    if isinstance(device, str) and device.isdigit():
        device = int(device)

    detector = make_detector(args, args.sample_rate)
    count = 0
    try:
        with AudioInput(AudioInputConfig(sample_rate=args.sample_rate, device=device)) as audio:
            logger.info("Listening at %d Hz, %d samples per block", args.sample_rate, detector.window_size)
            while args.blocks <= 0 or count < args.blocks:
                block = audio.read_block(detector.window_size, timeout=5.0)
                if block is None:
                    logger.error("No audio from the input device")
                    return 1
                count += 1
                try:
                    hz: float | None = detector.detect(block)
                except SilentOrDegenerateSignal:
                    hz = None
                out.write(format_estimate(hz, notes=args.notes) + "\n")
                out.flush()
    except sd.PortAudioError as exc:
        logger.error("Input device error: %s", exc)
        return 1
    return 0


def main(argv: Sequence[str] | None = None, out: TextIO | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")
    stream = out or sys.stdout

    if args.command == "serve":
        from freq_det.web.server import main as serve

        serve(host=args.host, port=args.port)
        return 0

    try:
        if args.command == "file":
            return run_file(args, stream)
        return run_mic(args, stream)
    except InvalidConfiguration as exc:
        logger.error("Invalid detector settings: %s", exc)
        return 2
    except FreqDetError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
