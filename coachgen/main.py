#!/usr/bin/env python3
"""
Command line entry point: generate one weekly training program.

Usage:
    coachgen "Generate a 800m program for U14 athletes, General period"
    coachgen --event 400m --age-group U16 --term Competition --period Specific --week 3
    coachgen --offline --event 5000m
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .config import ConfigManager, ConfigurationError
from .errors import GenerationError
from .formatter import SegmentRole, StyledDocument
from .orchestrator import create_request_orchestrator
from .program_prompt import ProgramParameters, build_program_prompt
from .structured_logging import setup_logging

logger = logging.getLogger(__name__)

RESET = '\033[0m'
ROLE_STYLES = {
    SegmentRole.DAY_HEADER: '\033[1;34m',      # Bold blue
    SegmentRole.FOCUS_LINE: '\033[3;36m',      # Italic cyan
    SegmentRole.SECTION_HEADER: '\033[1m',     # Bold
    SegmentRole.EXERCISE_LABEL: '\033[33m',    # Yellow
    SegmentRole.DETAIL: '',
    SegmentRole.PLAIN: '',
}
INDENTED_ROLES = (SegmentRole.EXERCISE_LABEL, SegmentRole.DETAIL)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Generate a weekly track and field training program",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "prompt",
        nargs="?",
        help="Free-text request (overrides the structured options)"
    )

    program = parser.add_argument_group("structured request")
    program.add_argument("--event", help="Event name, e.g. 800m or Long Jump")
    program.add_argument("--age-group", default="Senior", help="Age group, e.g. U14")
    program.add_argument("--term", default="Short Term", help="Training term")
    program.add_argument("--period", default="General", help="Training period")
    program.add_argument("--week", type=int, default=1, help="Week number")

    parser.add_argument(
        "--config",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )

    parser.add_argument(
        "--log-file",
        help="Path to log file"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print segments as JSON instead of coloured text"
    )

    parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip the remote service and render the offline program"
    )

    args = parser.parse_args(argv)
    if not args.prompt and not args.event:
        parser.error("either a prompt or --event is required")
    if args.week < 1:
        parser.error("--week must be at least 1")
    return args


def resolve_prompt(args: argparse.Namespace) -> str:
    if args.prompt:
        return args.prompt
    return build_program_prompt(ProgramParameters(
        age_group=args.age_group,
        event=args.event,
        term=args.term,
        period=args.period,
        week=args.week
    ))


def render_ansi(document: StyledDocument, color: bool = True) -> str:
    """Render segments one per line, blank line before each day header"""
    lines: List[str] = []
    for segment in document:
        if segment.role == SegmentRole.DAY_HEADER and lines:
            lines.append("")

        text = f"  {segment.text}" if segment.role in INDENTED_ROLES else segment.text
        style = ROLE_STYLES.get(segment.role, '') if color else ''
        lines.append(f"{style}{text}{RESET}" if style else text)

        if segment.role == SegmentRole.PLAIN and "\n" in segment.text:
            lines.append("")
    return "\n".join(lines)


async def main(argv: Optional[List[str]] = None) -> int:
    """Main function"""
    args = parse_arguments(argv)

    # Load environment variables
    load_dotenv()

    setup_logging(debug=args.debug, log_file=args.log_file)

    try:
        config = ConfigManager(args.config).load_config()
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    prompt = resolve_prompt(args)
    orchestrator = create_request_orchestrator(config)

    try:
        if args.offline:
            text = orchestrator.offline_generator.generate_offline(prompt)
            document = orchestrator.formatter.format(text)
        else:
            orchestrator.start()
            # Give the monitor one scan before the first request
            orchestrator.monitor.refresh()
            document = await orchestrator.generate(prompt)
    except GenerationError as e:
        print(e.user_message, file=sys.stderr)
        return 1
    finally:
        await orchestrator.close()

    if args.json:
        print(json.dumps(document.to_dicts(), indent=2, ensure_ascii=False))
    else:
        print(render_ansi(document, color=sys.stdout.isatty()))
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
