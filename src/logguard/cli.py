"""
Command line interface.

    logguard transform Foo.groovy -o Foo.out.groovy --report yaml --check
    logguard --config logguard.yaml analyze Foo.groovy
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from logguard import __version__
from logguard.analyzer import analyze_unit, check_types
from logguard.backends import generate_source, save_source_file
from logguard.config import load_config
from logguard.errors import LogGuardError
from logguard.logging_utils import configure_logging
from logguard.parser import parse_file
from logguard.serialization import report_to_json, report_to_yaml
from logguard.transform import LogTransformation

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logguard",
        description="Add Commons Logging loggers and guard logging calls in @Commons classes",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="YAML settings file (default: $LOGGUARD_CONFIG)")
    parser.add_argument("--log-level", help="Override the configured log level")
    sub = parser.add_subparsers(dest="command", required=True)

    transform = sub.add_parser("transform", help="Transform a source file")
    transform.add_argument("source", help="Path to the source file")
    transform.add_argument("-o", "--output", help="Write the transformed source here (default: stdout)")
    transform.add_argument("--report", choices=["yaml", "json"], help="Print the transformation report")
    transform.add_argument("--check", action="store_true", help="Type check the result against the class path")

    analyze = sub.add_parser("analyze", help="Report logging calls and unresolved types")
    analyze.add_argument("source", help="Path to the source file")

    return parser


def _run_transform(args: argparse.Namespace, config) -> int:
    unit = parse_file(args.source)
    engine = LogTransformation.from_config(config)
    report = engine.transform_unit(unit)

    if args.check:
        check_types(unit, engine.classpath)

    if args.output:
        save_source_file(unit, args.output)
        logger.info("Wrote %s", args.output)
    else:
        sys.stdout.write(generate_source(unit))

    if args.report == "yaml":
        sys.stderr.write(report_to_yaml(report))
    elif args.report == "json":
        sys.stderr.write(report_to_json(report) + "\n")
    return 0


def _run_analyze(args: argparse.Namespace, config) -> int:
    unit = parse_file(args.source)
    report = analyze_unit(unit, config.class_path())

    print(f"Unit: {report.unit_name}")
    print(f"  Classes: {report.total_classes}")
    print(f"  Guarded logging calls: {report.guarded_calls}")
    print(f"  Unguarded logging calls: {report.unguarded_calls}")
    for summary in report.classes:
        logger_field = summary.logger_field or "(none)"
        print(f"  {summary.name}: logger={logger_field} guarded={summary.guarded_calls} unguarded={summary.unguarded_calls}")
    if report.warnings:
        print(f"\n  Warnings ({len(report.warnings)}):")
        for warning in report.warnings:
            print(f"    - {warning}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"logguard: {e}", file=sys.stderr)
        return 1

    configure_logging(args.log_level or config.log_level, config.log_file)

    try:
        if args.command == "transform":
            return _run_transform(args, config)
        return _run_analyze(args, config)
    except FileNotFoundError as e:
        print(f"logguard: {e}", file=sys.stderr)
        return 1
    except LogGuardError as e:
        print(f"logguard: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
