"""Main entry point for the DrumCraft CLI."""

import sys
import argparse
from typing import List, Optional

import numpy as np

from ..core.config import ConfigManager
from ..core.factory import ComponentFactory
from ..drums import get_drum, list_drums
from ..logging_config import setup_logging, get_logger
from ..tuning_session import TuningSession
from ..tuning_types import HeadSide, PitchEstimate

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DrumCraft - Drum head tuning aid")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--config-dir", default=None, help="Configuration directory (default: ~/.config/drumcraft)"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("drums", help="List drum presets")

    def add_drum_arguments(sub, required=True):
        sub.add_argument(
            "--drum",
            required=required,
            choices=[drum.id for drum in list_drums()],
            help="Drum preset",
        )
        sub.add_argument(
            "--head",
            default=HeadSide.BATTER.value,
            choices=[side.value for side in HeadSide],
            help="Head to tune (default: batter)",
        )
        sub.add_argument(
            "--target", type=float, default=None, help="Target frequency in Hz (default: mid-range)"
        )

    listen_parser = subparsers.add_parser("listen", help="Show live readings from the microphone")
    add_drum_arguments(listen_parser)
    listen_parser.add_argument(
        "--duration", type=float, default=None, help="Stop after this many seconds"
    )
    listen_parser.add_argument("--device", type=int, default=None, help="Audio input device ID")

    analyze_parser = subparsers.add_parser("analyze", help="Estimate the pitch of a recording")
    analyze_parser.add_argument("file", help="Audio file (WAV, FLAC, ...)")
    add_drum_arguments(analyze_parser, required=False)

    lugs_parser = subparsers.add_parser(
        "lugs", help="Record one recording per lug and report evenness"
    )
    add_drum_arguments(lugs_parser)
    lugs_parser.add_argument("files", nargs="+", help="One recording per lug, in lug order")

    return parser


def _open_session(args) -> TuningSession:
    session = TuningSession()
    session.select_drum(get_drum(args.drum), args.head)
    if args.target is not None:
        session.set_target(args.target)
    return session


def _median_frequency(factory: ComponentFactory, path: str) -> Optional[float]:
    """Median of the accepted readings over every window of a file."""
    source = factory.create_audio_source("wav", file_path=path)
    service = factory.create_listening_service(audio_source=source, poll_interval=0)

    readings: List[float] = []

    def on_estimate(estimate: PitchEstimate):
        if estimate.is_detected and service.accepts(estimate.frequency):
            readings.append(estimate.frequency)

    if not service.start(on_estimate):
        return None
    service.run()
    service.stop()

    if not readings:
        return None
    return round(float(np.median(readings)), 1)


def cmd_drums(args, factory: ComponentFactory) -> int:
    for drum in list_drums():
        low, high = drum.batter_range
        res_low, res_high = drum.resonant_range
        print(
            f"{drum.id:<10} {drum.name:<10} {drum.lugs} lugs  "
            f"batter {low:g}-{high:g} Hz  resonant {res_low:g}-{res_high:g} Hz  "
            f"sizes {', '.join(drum.sizes)}"
        )
    return 0


def cmd_listen(args, factory: ComponentFactory) -> int:
    session = _open_session(args)
    source = factory.create_audio_source(device_id=args.device)
    service = factory.create_listening_service(audio_source=source)

    print(f"Target {session.target_frequency:g} Hz for {session.active_key}. Ctrl+C to stop.")

    def on_estimate(estimate: PitchEstimate):
        frequency = service.current_frequency
        if frequency is None:
            line = "no reading"
        else:
            line = f"{frequency:7.1f} Hz  {session.deviation(frequency).label}"
        meter = "#" * int(service.volume * 20)
        print(f"\r{line:<28} [{meter:<20}]", end="", flush=True)

    if not service.start(on_estimate):
        print("Could not open an audio input device", file=sys.stderr)
        return 1

    try:
        service.run(duration=args.duration)
    except KeyboardInterrupt:
        pass
    finally:
        service.stop()
        print()
    return 0


def cmd_analyze(args, factory: ComponentFactory) -> int:
    frequency = _median_frequency(factory, args.file)
    if frequency is None:
        print(f"{args.file}: no reading")
        return 1

    line = f"{args.file}: {frequency:.1f} Hz"
    if args.drum:
        session = _open_session(args)
        line += f" ({session.deviation(frequency).label}, target {session.target_frequency:g} Hz)"
    print(line)
    return 0


def cmd_lugs(args, factory: ComponentFactory) -> int:
    session = _open_session(args)
    if len(args.files) > session.lug_count:
        print(
            f"{get_drum(args.drum).name} has {session.lug_count} lugs, got {len(args.files)} files",
            file=sys.stderr,
        )
        return 2

    for position, path in enumerate(args.files):
        session.record(position, _median_frequency(factory, path))

    print(f"{session.active_key} target {session.target_frequency:g} Hz")
    for position, frequency in session.readings().items():
        if frequency is None:
            print(f"  Lug {position + 1}: --")
        else:
            print(f"  Lug {position + 1}: {frequency:.1f} Hz  {session.deviation(frequency).label}")

    stats = session.statistics()
    mean = f"{stats.mean:.1f} Hz" if stats.mean is not None else "--"
    print(
        f"Readings {stats.count}/{stats.lug_count}  mean {mean}  spread {stats.spread:.1f} Hz  "
        f"{'EVEN' if stats.is_even else 'UNEVEN'}"
    )
    return 0


COMMANDS = {
    "drums": cmd_drums,
    "listen": cmd_listen,
    "analyze": cmd_analyze,
    "lugs": cmd_lugs,
}


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments, or None to use sys.argv

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.command is None:
        parser.print_help()
        return 1

    setup_logging(level="DEBUG" if parsed_args.debug else "WARNING")
    factory = ComponentFactory(ConfigManager(parsed_args.config_dir))
    return COMMANDS[parsed_args.command](parsed_args, factory)


if __name__ == "__main__":
    sys.exit(main())
