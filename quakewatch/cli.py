"""Command-line interface.

Usage:
    # Run the service
    quakewatch serve --host 0.0.0.0 --port 8000

    # Classify a GeoJSON earthquake file against plate boundaries
    quakewatch analyze earthquakes.geojson plates.geojson --threshold-km 250
"""

import argparse
import logging
import sys

from quakewatch.core.proximity import DEFAULT_THRESHOLD_KM


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "quakewatch.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )
    return 0


def _analyze(args: argparse.Namespace) -> int:
    from quakewatch.analysis import analyze_files

    try:
        summary = analyze_files(args.earthquakes, args.boundaries, args.threshold_km)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Near plate boundary (<= {args.threshold_km:.0f} km): {summary.near_count}")
    print(f"Beyond threshold: {summary.far_count}")

    for result in summary.near:
        props = result.event.get("properties") or {}
        print(
            f"  M{props.get('mag')}  {props.get('place')}  "
            f"{result.nearest_distance_km:.0f} km"
        )

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quakewatch",
        description="Earthquake feed ingestion and plate proximity analysis",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP/WebSocket service")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve.add_argument("--port", type=int, default=8000, help="Bind port")
    serve.set_defaults(handler=_serve)

    analyze = subparsers.add_parser(
        "analyze",
        help="Classify earthquakes by distance to plate boundaries",
    )
    analyze.add_argument("earthquakes", help="GeoJSON FeatureCollection of earthquakes")
    analyze.add_argument("boundaries", help="GeoJSON FeatureCollection of plate boundaries")
    analyze.add_argument(
        "--threshold-km",
        type=float,
        default=DEFAULT_THRESHOLD_KM,
        help=f"Near/far cut-off in km (default: {DEFAULT_THRESHOLD_KM:.0f})",
    )
    analyze.set_defaults(handler=_analyze)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
