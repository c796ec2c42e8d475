import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

from .core.config import ConfigError, load_config
from .core.diagrams import DiagramService, OutputTarget, OutputWriter
from .core.symbols import SolutionLoadError, Workspace

USAGE = "Usage: solution-modeler <sln-filename> <puml-filename>"


def setup_logging(log_level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ],
        force=True,
    )


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="solution-modeler",
        description="Solution Modeler - PlantUML class diagrams for C# solutions",
    )
    parser.add_argument("solution", nargs="?", help="Solution (.sln, .slnx) or project (.csproj) file")
    parser.add_argument("output", nargs="?", help="Base output file, e.g. out/model.puml")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML configuration file (default: solution-modeler.yaml beside the solution)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    parser.add_argument(
        "--wait",
        action="store_true",
        default=None,
        help="Wait for Enter before exiting (default: off; see also run.wait_after_end)"
    )
    parser.add_argument(
        "--exclude-projects",
        type=str,
        default=None,
        help="Comma-separated project name markers to skip (default: Test,Example,Sample)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for Solution Modeler."""
    args = build_parser().parse_args(argv)

    if not args.solution or not args.output:
        print(USAGE)
        return 0

    solution_path = os.path.abspath(args.solution)
    if not os.path.isfile(solution_path):
        print(f"Solution not found: {solution_path}")
        return 0

    load_dotenv(find_dotenv(usecwd=True))
    try:
        config = load_config(args.config, solution_path).with_overrides(
            exclude_markers=args.exclude_projects,
            log_level=args.log_level,
            wait_after_end=args.wait,
        )
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return 0

    setup_logging(config.log_level)

    try:
        modules = Workspace(config.exclude_markers).open_solution(solution_path)
    except SolutionLoadError as e:
        logger.error(str(e))
        return 0

    writer = OutputWriter(OutputTarget.from_path(args.output, config.default_extension))
    DiagramService(writer).run(modules)

    if config.wait_after_end:
        input("Press [Enter] to exit...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
