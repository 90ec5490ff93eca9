from __future__ import annotations
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .core.registry import ImageSource
from .core.report import write_report
from .services import (
    IAnnotationSession, ILogger, IngestionResult, LogLevel, configure_services,
)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bbox-overlay",
        description="Match JSON bounding-box annotations to images and report the result.",
    )
    parser.add_argument("--images", nargs="*", type=Path, default=[],
                        help="Image files; only names and sizes are read")
    parser.add_argument("--annotations", nargs="*", type=Path, default=[],
                        help="JSON annotation files, ingested in order")
    parser.add_argument("--paste", default=None,
                        help="Inline JSON payload, ingested after the files")
    parser.add_argument("--config", type=Path, default=None, help="JSON or YAML config file")
    parser.add_argument("--log-file", type=Path, default=None)
    parser.add_argument("--report", type=Path, default=None,
                        help="Write a JSON (or .yaml) report of the session")
    parser.add_argument("--verbose", action="store_true", help="Log info messages to stderr")
    return parser.parse_args(argv)


def image_sources(paths: List[Path]) -> List[ImageSource]:
    sources = []
    for path in paths:
        try:
            size = path.stat().st_size
        except OSError:
            size = 0
        sources.append(ImageSource(name=path.name, byte_size=size))
    return sources


def print_results(results: List[IngestionResult]) -> None:
    for result in results:
        if result.error:
            print(f"[{result.source}] {result.error}")


def print_summary(session: IAnnotationSession) -> None:
    plan = session.render_plan()
    print(f"{plan.image_counter}, {plan.box_counter}")
    for row in plan.boxes:
        line = f"{row.header} {row.source} | {row.image} | {row.label} | {row.coords}"
        if row.notes:
            line += f" | {row.note_text}"
        print(line)
    for view in plan.images:
        if view.metadata is not None:
            print(f"{view.name}: {view.metadata.to_dict()}")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    container = configure_services(
        log_file=args.log_file,
        config_file=args.config,
        console_level=LogLevel.INFO if args.verbose else None,
    )
    logger = container.get(ILogger)
    session = container.get(IAnnotationSession)

    session.load_images(image_sources(args.images))
    results = session.ingest_files(args.annotations)
    if args.paste is not None:
        results.append(session.ingest_pasted(args.paste))

    print_results(results)
    print_summary(session)

    if args.report:
        try:
            path = write_report(args.report, session.render_plan())
        except OSError as e:
            logger.error(f"Could not write report to {args.report}", exception=e)
            return 1
        logger.info(f"Report written to {path}")

    return 0 if session.render_plan().boxes else 1


if __name__ == "__main__":
    sys.exit(main())
