from __future__ import annotations

import argparse
from pathlib import Path

from config_loader import AppConfig, default_config, load_config
from logging_utils import configure_logging, get_logger

from .errors import ScriptError
from .pipeline import SlidePipeline
from .script_loader import load_script

logger = get_logger(__name__)

DEFAULT_CONFIG_NAME = "config.yaml"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compile a visual-novel script into a Beamer slide deck")
    parser.add_argument("script", help="Path to the .rpy script")
    parser.add_argument(
        "--config",
        help=f"Path to YAML configuration (default: {DEFAULT_CONFIG_NAME} when present)",
    )
    parser.add_argument(
        "--output",
        help="Path of the .tex file to write (default: <output_dir>/<script stem>.tex)",
    )
    parser.add_argument(
        "--entry-label",
        help="Label to start the traversal from (default: traversal.entry_label or 'start')",
    )
    parser.add_argument(
        "--title",
        help="Deck title shown on the title frame (default: render.title or the script name)",
    )
    parser.add_argument(
        "--dump-lines",
        action="store_true",
        help="Print the assembled logical lines and exit",
    )
    parser.add_argument(
        "--print-plan",
        action="store_true",
        help="Print generated plan.json to stdout after completion",
    )
    return parser


def _resolve_config(config_arg: str | None) -> AppConfig:
    if config_arg:
        return load_config(config_arg)
    candidate = Path(DEFAULT_CONFIG_NAME)
    if candidate.exists():
        return load_config(candidate)
    return default_config()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = _resolve_config(args.config)
    configure_logging(level=config.logging_level, log_file=config.log_file)
    logger.debug("Resolved configuration: %s", config.dumps())

    if args.dump_lines:
        document = load_script(args.script)
        print(document.dump_lines())
        return 0

    pipeline = SlidePipeline(config)
    try:
        result = pipeline.run(
            args.script,
            output_path=args.output,
            entry_label=args.entry_label,
            title=args.title,
        )
    except ScriptError as exc:
        logger.error("Failed to compile %s: %s", args.script, exc)
        return 1

    logger.info("Slide deck written: %s", result.output_path)

    if args.print_plan:
        print(result.plan_path.read_text(encoding="utf-8"))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
