"""
Check local image files for blur without running the HTTP service.

    python -m ecofinds_quality.cli photos/*.jpg --threshold 120

Prints one JSON object per file, in argument order. With --strict the exit
status is 1 when any file is blurry or could not be analysed.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from ecofinds_quality.core.config import get_settings
from ecofinds_quality.core.errors import QualityAPIError
from ecofinds_quality.core.logging import configure_logging
from ecofinds_quality.schemas.blur import BlurAnalysis, BlurConfig
from ecofinds_quality.services.blur_service import analyse_blur, error_analysis
from ecofinds_quality.services.quality_labels import quality_text
from ecofinds_quality.utils.image_loader import decode_bytes

logger = logging.getLogger(__name__)


def check_file(path: Path, config: BlurConfig) -> BlurAnalysis:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return error_analysis(config.threshold, f"Cannot read file: {exc}")

    try:
        image = decode_bytes(raw, config)
        return analyse_blur(image.pixels, config.threshold)
    except QualityAPIError as exc:
        logger.warning("Blur analysis failed for %s: %s", path, exc)
        return error_analysis(config.threshold, str(exc))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ecofinds-blur-check",
        description="Score image files for blur (Laplacian variance).",
    )
    parser.add_argument("paths", nargs="+", type=Path, help="Image files to check.")
    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Blur threshold (default: BLUR_THRESHOLD or 100).",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 if any image is blurry or fails.",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.threshold is not None and not args.threshold > 0:
        print("error: --threshold must be positive", file=sys.stderr)
        return 2

    # stdout carries the JSON results.
    configure_logging(
        level="DEBUG" if args.verbose else "WARNING",
        json_logs=False,
        stream=sys.stderr,
    )
    config = get_settings().blur_config(args.threshold)

    flagged = 0
    for path in args.paths:
        analysis = check_file(path, config)
        record = {"path": str(path), **analysis.model_dump()}
        if analysis.quality != "error":
            record["text"] = quality_text(analysis.blur_score, analysis.threshold)
        print(json.dumps(record))
        if analysis.is_blurry:
            flagged += 1

    return 1 if args.strict and flagged else 0


if __name__ == "__main__":
    sys.exit(main())
