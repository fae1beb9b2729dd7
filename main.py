"""Command-line entry point for the pathsense hazard detector."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from config import ConfigController
from config.settings import AppSettings
from core.logging import enable_file_logging, logger, set_level


def configure_logging(level_name: str) -> None:
    """Configure application logging."""

    level = logging._nameToLevel.get(level_name.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    set_level(level_name)


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Raw command-line arguments.

    Returns:
        Parsed arguments namespace.
    """

    parser = argparse.ArgumentParser(
        description="Detect and announce walking hazards from a live camera."
    )
    parser.add_argument(
        "--diagnostics",
        action="store_true",
        help="Run diagnostics probes and exit.",
    )
    parser.add_argument("--camera-index", type=int, help="Local camera device index.")
    parser.add_argument("--camera-url", type=str, help="Network stream URL (IP webcam, DroidCam).")
    parser.add_argument(
        "--mute",
        action="store_true",
        help="Start with spoken and vibration alerts disabled.",
    )
    parser.add_argument(
        "--no-level-detection",
        action="store_true",
        help="Disable the stair, curb and fence heuristic.",
    )
    parser.add_argument(
        "--duration",
        type=float,
        help="Stop after this many seconds (default: run until Ctrl-C).",
    )
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file.")
    return parser.parse_args(argv)


def run_diagnostics_report() -> int:
    from config.diagnostics import probe as config_probe
    from core.diagnostics import probe as core_probe
    from diagnostics.models import DiagnosticStatus
    from diagnostics.runner import format_results, run_diagnostics
    from hardware.diagnostics import probe as hardware_probe
    from vision.diagnostics import probe as vision_probe

    results = run_diagnostics(
        [
            config_probe,
            core_probe,
            hardware_probe,
            vision_probe,
        ]
    )
    print(format_results(results))
    return 1 if any(result.status is DiagnosticStatus.FAIL for result in results) else 0


def main(argv: list[str] | None = None) -> int:
    """Application entry point.

    Args:
        argv: Optional list of command-line arguments.

    Returns:
        Process exit code.
    """

    if argv is None:
        argv = sys.argv[1:]

    args = parse_args(argv)
    if args.diagnostics:
        return run_diagnostics_report()

    try:
        config = ConfigController.get_instance().get_config()
        settings = AppSettings.from_config(config)
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2
    configure_logging(str(config.get("logging_level", "INFO")))

    if args.log_file is not None:
        enable_file_logging(args.log_file)
        logger.info("Writing logs to %s", args.log_file)
    elif config.get("file_logging_enabled", False):
        log_file_path = Path(str(config.get("log_dir", "logs"))) / "pathsense.log"
        enable_file_logging(log_file_path)
        logger.info("Writing logs to %s", log_file_path)

    from core.app import AppConfig, run

    app_config = AppConfig(
        camera_index=args.camera_index,
        camera_url=args.camera_url,
        mute=args.mute,
        level_detection=not args.no_level_detection,
        duration_s=args.duration,
    )
    return run(settings, app_config)


if __name__ == "__main__":
    raise SystemExit(main())
