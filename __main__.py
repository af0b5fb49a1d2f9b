#!/usr/bin/env python3
"""
GreenWalk - On-Course Distance and Green Mapping
Entry Point Module
Handles dependency checking, argument parsing, logging setup and the
``replay`` command that runs a recorded location feed through the engine.
"""
import argparse
import sys
import time
import traceback
from pathlib import Path
from typing import List, Optional

VERSION = "1.0.0"


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="greenwalk",
        description="GreenWalk - On-course distance and green mapping",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python . --check-deps                          # Check dependencies only
  python . replay round.json --mode track        # Measure a recorded walk
  python . replay green7.json --mode green --kml green7.kml
  python . --debug --log-dir ./logs replay round.json
        """
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"GreenWalk {VERSION}"
    )
    parser.add_argument(
        "--check-deps", "-c",
        action="store_true",
        help="Check dependencies and exit"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        help="Custom directory for log files"
    )
    subparsers = parser.add_subparsers(dest="command")
    replay = subparsers.add_parser("replay", help="Replay a recorded JSON location feed")
    replay.add_argument("feed", type=str, help="JSON file of samples and failures")
    replay.add_argument(
        "--mode",
        choices=("track", "green"),
        default="track",
        help="Measure a distance track or map a green boundary"
    )
    replay.add_argument(
        "--pivot-at",
        type=int,
        action="append",
        default=[],
        metavar="N",
        help="Drop a pivot at the Nth accepted fix (track mode, repeatable)"
    )
    replay.add_argument(
        "--units",
        choices=("metres", "yards"),
        default="yards",
        help="Display units for the summary"
    )
    replay.add_argument("--kml", type=str, help="Write the result to a KML file")
    return parser.parse_args(argv)


def check_dependencies() -> bool:
    """Check if required dependencies are available."""
    # Package name mapping: display_name -> (import_name, description)
    required_packages = {
        'PySide6': ('PySide6', 'Qt core: location signals and settings'),
    }
    missing_required = []
    print(f"Python version: {sys.version}")
    print(f"Python executable: {sys.executable}\n")
    for display_name, (import_name, description) in required_packages.items():
        try:
            module = __import__(import_name)
            if import_name == 'PySide6':
                from PySide6 import QtCore  # noqa: F401
            print(f"OK {display_name}: {description} "
                  f"(version: {getattr(module, '__version__', 'unknown')})")
        except ImportError as e:
            missing_required.append(f"{display_name} ({description})")
            print(f"ERROR {display_name}: {description} - MISSING")
            print(f"   Import error: {e}")
    if missing_required:
        print("\nMissing required dependencies:")
        for package in missing_required:
            print(f"   - {package}")
        print("\nTry installing with:")
        print(f"   {sys.executable} -m pip install PySide6")
        return False
    return True


def run_replay(args: argparse.Namespace) -> int:
    """Run a recorded feed through the engine and print the result."""
    from engine import MeasurementEngine
    from errors import GreenWalkError, PivotLimitReached, SampleRejected
    from kml_export import green_to_kml, track_to_kml, write_kml
    from location_source import EngineFeed, SimulatedLocationSource
    from logger import get_logger
    from models import MappingState
    from settings_store import load_engine_config
    from units import UnitSystem, format_distance

    logger = get_logger()
    feed_path = Path(args.feed)
    if not feed_path.exists():
        print(f"Feed file not found: {feed_path}")
        return 1
    units = UnitSystem.METRES if args.units == "metres" else UnitSystem.YARDS
    engine = MeasurementEngine(load_engine_config(), units=units)
    source = SimulatedLocationSource.from_feed(feed_path, interval_ms=None)
    feed = EngineFeed(source, engine)
    pivot_at = set(args.pivot_at)

    with logger.timer(f"replay {feed_path.name}"):
        source.start()
        while source.is_active:
            before = feed.forwarded
            emitted = source.emitted
            source.manual_step()
            if source.is_active and source.emitted == emitted:
                break
            if feed.forwarded == before:
                continue
            if args.mode == "track":
                if engine.track is None:
                    engine.start_track()
                elif feed.forwarded in pivot_at:
                    try:
                        engine.add_pivot()
                    except (SampleRejected, PivotLimitReached) as e:
                        print(f"Pivot at fix {feed.forwarded} skipped: {e}")
            elif engine.mapping.state is MappingState.IDLE:
                engine.start_mapping()
        feed.disconnect()

    print(f"Fixes used: {feed.forwarded}, throttled: {feed.throttled}, "
          f"signal: {engine.signal_status.value}")
    try:
        if args.mode == "track":
            if engine.track is None:
                print("No fix received, nothing to measure")
                return 1
            record = engine.finish_track()
            metrics = engine.track_metrics()
            print(f"Total distance: {record.primary_value}")
            print(f"Last leg: {format_distance(metrics.leg_distance, units)}")
            print(f"Pivots: {metrics.pivot_count}")
            print(f"Elevation: {record.secondary_value or 'n/a'}")
            if args.kml:
                tree = track_to_kml(
                    engine.track_points(),
                    metadata={"TotalDistanceMeters": round(metrics.total_distance, 2)},
                )
        else:
            if engine.mapping.state is MappingState.IDLE:
                print("No fix received, nothing to map")
                return 1
            if not engine.mapping.closed:
                engine.force_close_mapping()
                print("Boundary closed manually")
            metrics = engine.green_metrics()
            record = engine.save_green()
            print(f"Area: {record.primary_value}")
            print(f"Perimeter: {format_distance(metrics.perimeter, units)}")
            print(record.secondary_value)
            if args.kml:
                tree = green_to_kml(
                    record.points,
                    metadata={"BunkerPercentage": metrics.bunker_percentage},
                )
    except (GreenWalkError, ValueError) as e:
        print(f"Cannot summarise replay: {e}")
        return 1
    if args.kml:
        print(f"KML written to: {write_kml(tree, args.kml)}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the GreenWalk command line."""
    args = None
    try:
        args = parse_arguments(argv)
        print("\n" + "=" * 60)
        print(f"GreenWalk {VERSION} - On-Course Distance and Green Mapping")
        print("=" * 60 + "\n")
        print("Checking dependencies...")
        deps_ok = check_dependencies()
        if args.check_deps:
            if deps_ok:
                print("\nAll dependencies are satisfied!")
                return 0
            print("\nSome dependencies are missing!")
            return 1
        if not deps_ok:
            print("\nCannot run without the required dependencies.")
            return 1
        from logger import setup_logger
        setup_logger(log_dir=Path(args.log_dir) if args.log_dir else None, debug=args.debug)
        if args.debug:
            print("Debug logging enabled\n")
        if args.command == "replay":
            return run_replay(args)
        print("No command given; see --help")
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 130
    except Exception as e:
        print("\nCritical error in GreenWalk:")
        print(f"   {type(e).__name__}: {e}")
        if args is not None and args.debug:
            print("\nDebug traceback:")
            traceback.print_exc()
        else:
            print("\nRun with --debug for detailed error information")
        return 1


if __name__ == "__main__":
    start_time = time.time()
    exit_code = main()
    print(f"\nGreenWalk ran for {time.time() - start_time:.2f} seconds")
    sys.exit(exit_code)
