# anonymization/cli.py

"""Command-line interface for the anonymization engine.

Usage (options go before the sub-command):
    # Anonymize text from stdin (stdout: JSON result with metadata)
    echo 'Mail jane.doe@example.com' | python -m anonymization.cli --patterns email anonymize

    # Use a catalogue preset and a reproducible synthetic replacement
    echo 'Call 555-123-4567' | python -m anonymization.cli --preset anonymize_basic anonymize
    echo 'Call 555-123-4567' | python -m anonymization.cli --strategy replace --seed 7 anonymize

    # Detection report with risk level
    echo 'SSN 123-45-6789' | python -m anonymization.cli detect

    # Add a custom pattern for this run, matched case-sensitively
    echo 'EMP-123456' | python -m anonymization.cli --case-sensitive --custom 'employeeId=EMP-\\d{6}' detect

    # Catalogue listings
    python -m anonymization.cli patterns
    python -m anonymization.cli presets
"""

import argparse
import json
import logging
import random
import sys
from typing import Any, List, Optional

from anonymization.core.domain import AnonymizationOptions
from anonymization.core.exceptions import AnonymizationError
from anonymization.core.loader import PatternLoader
from anonymization.engine.anonymizer import AnonymizationPipeline
from anonymization.logging_config import configure_logging
from anonymization.logic.strategies import StrategyResolver
from anonymization.service import pipeline as service
from anonymization.service.config import settings

logger = logging.getLogger(__name__)


def _emit(data: Any) -> None:
    json.dump(data, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def _split(value: str) -> Optional[List[str]]:
    names = [v.strip() for v in value.split(",") if v.strip()]
    return names or None


def _register_custom(specs: List[str]) -> None:
    for spec in specs:
        name, sep, source = spec.partition("=")
        if not sep:
            raise SystemExit(f"--custom expects NAME=REGEX, got: {spec}")
        outcome = service.add_custom_pattern(name.strip(), source)
        if not outcome["success"]:
            raise SystemExit(outcome["error"])


def _build_options(args: argparse.Namespace) -> AnonymizationOptions:
    if args.preset:
        options = service.options_from_preset(args.preset)
    else:
        options = AnonymizationOptions(
            default_strategy=settings.default_strategy,
            preserve_format=settings.preserve_format,
            case_sensitive=settings.case_sensitive,
            mask_char=settings.mask_char,
        )
    if args.patterns:
        options.selected_patterns = _split(args.patterns)
    if args.strategy:
        options.default_strategy = args.strategy
    if args.no_preserve_format:
        options.preserve_format = False
    if args.case_sensitive:
        options.case_sensitive = True
    return options


def cmd_anonymize(args: argparse.Namespace) -> None:
    """Anonymize plain text on stdin."""
    pipeline = service.AnonymizationService.get_instance()
    if args.seed is not None:
        pipeline = AnonymizationPipeline(
            pipeline.registry,
            detector=pipeline.detector,
            resolver=StrategyResolver(rng=random.Random(args.seed), hash_key=settings.hash_key),
            scorer=pipeline.scorer,
            defaults=pipeline.defaults,
        )
    result = pipeline.anonymize(sys.stdin.read(), _build_options(args))
    _emit(result.to_dict())


def cmd_detect(args: argparse.Namespace) -> None:
    """Report sensitive data in plain text on stdin."""
    options = _build_options(args)
    report = service.AnonymizationService.get_instance().detect_sensitive_data(
        sys.stdin.read(),
        options.selected_patterns,
        case_sensitive=options.case_sensitive,
    )
    _emit(report.to_dict())


def cmd_patterns(args: argparse.Namespace) -> None:
    """List registered patterns."""
    _emit(service.list_patterns())


def cmd_presets(args: argparse.Namespace) -> None:
    """List catalogue presets."""
    _emit(PatternLoader.get_instance().list_presets())


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="text-anonymizer",
        description="Detect and anonymize sensitive data in text",
    )
    parser.add_argument("--patterns", default="", help="Comma-separated pattern names")
    parser.add_argument("--strategy", default="", help="mask, hash, keyed_hash, replace or remove")
    parser.add_argument("--preset", default="", help="Catalogue preset name")
    parser.add_argument("--no-preserve-format", action="store_true", help="Mask whole values")
    parser.add_argument("--case-sensitive", action="store_true", help="Case-sensitive matching")
    parser.add_argument("--seed", type=int, default=None, help="Seed for synthetic values")
    parser.add_argument(
        "--custom", action="append", default=[], metavar="NAME=REGEX",
        help="Register a custom pattern (repeatable)",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    parser.add_argument(
        "--log-format", choices=["json", "text"], default="json", help="Log line format (stderr)"
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("anonymize", help="Anonymize text (stdin)")
    sub.add_parser("detect", help="Detect sensitive data (stdin)")
    sub.add_parser("patterns", help="List patterns")
    sub.add_parser("presets", help="List presets")

    args = parser.parse_args(argv)
    configure_logging(args.log_level, stream=sys.stderr, json_output=args.log_format == "json")

    cmds = {
        "anonymize": cmd_anonymize,
        "detect": cmd_detect,
        "patterns": cmd_patterns,
        "presets": cmd_presets,
    }

    try:
        _register_custom(args.custom)
        cmds[args.command](args)
    except AnonymizationError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
