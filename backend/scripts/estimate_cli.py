"""
Command-line access to the duration estimator.

Runs estimates and reads/writes the runtime config override without the
HTTP server, e.g. to try keyword rules before saving them from the admin page.

Usage:
  python scripts/estimate_cli.py estimate --service-type repair --year 2010 \\
      --description "engine stalls, brakes squeak"
  python scripts/estimate_cli.py estimate --heuristic-only ...
  python scripts/estimate_cli.py show-config
  python scripts/estimate_cli.py set-config --file override.json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config.errors import EstimatorError  # noqa: E402
from config.settings import settings  # noqa: E402
from models.estimation import EstimationInput, ServiceType  # noqa: E402
from services.config_store import EstimatorConfigProvider, OverrideStore, serialize_config  # noqa: E402
from services.estimation_service import EstimationService  # noqa: E402
from utils.estimate_logger import log_config, log_estimate  # noqa: E402
from utils.logging_setup import configure_logging  # noqa: E402


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Moped/motorcycle job duration estimator")
    parser.add_argument(
        "--override-path",
        default=None,
        help=f"Runtime override file (default: {settings.estimator_override_path})",
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    sub = parser.add_subparsers(dest="command", required=True)

    est = sub.add_parser("estimate", help="Estimate technician hours for a job")
    est.add_argument("--service-type", required=True, help=", ".join(t.value for t in ServiceType))
    est.add_argument("--description", required=True, help="Job description")
    est.add_argument("--make", default="", help="Vehicle make")
    est.add_argument("--model", default="", help="Vehicle model")
    est.add_argument("--year", default="", help="Vehicle model year")
    est.add_argument(
        "--heuristic-only",
        action="store_true",
        help="Skip the external model and use the keyword heuristic",
    )
    est.add_argument("--json", action="store_true", help="Print {estimatedHours, source} as JSON")

    sub.add_parser("show-config", help="Print the effective configuration")

    put = sub.add_parser("set-config", help="Replace the runtime override with a JSON file")
    put.add_argument("--file", required=True, help="Override document (same shape as show-config)")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level)

    provider = EstimatorConfigProvider(OverrideStore(args.override_path))

    if args.command == "estimate":
        service = EstimationService(config_provider=provider)
        estimation_input = EstimationInput(
            serviceType=args.service_type,
            vehicleMake=args.make,
            vehicleModel=args.model,
            vehicleYear=args.year,
            description=args.description,
        )
        estimate = asyncio.run(
            service.estimate_with_source(estimation_input, use_external=not args.heuristic_only)
        )
        if args.json:
            print(json.dumps({"estimatedHours": estimate.hours, "source": estimate.source.value}))
        else:
            log_estimate(estimation_input, estimate)
        return 0

    if args.command == "show-config":
        log_config(serialize_config(provider.current()))
        return 0

    if args.command == "set-config":
        try:
            with open(args.file, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            print(f"Could not read {args.file}: {e}", file=sys.stderr)
            return 2
        try:
            config = provider.save_override(document)
        except EstimatorError as e:
            print(f"{e.code}: {e.message}", file=sys.stderr)
            return 1
        log_config(serialize_config(config), title="SAVED ESTIMATOR CONFIG")
        return 0

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
