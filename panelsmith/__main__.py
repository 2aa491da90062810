"""
Panelsmith Main Entry Point

Run the API server, or generate one comic headlessly with ``--cli``.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from panelsmith.core.config import load_config, set_config
from panelsmith.core.constants import JobType
from panelsmith.core.exceptions import ConfigurationError
from panelsmith.core.logging_config import LogLevel, setup_logging, get_logger


def main():
    """Main entry point for Panelsmith."""
    parser = argparse.ArgumentParser(
        description="Panelsmith - background comic generation with pollable jobs"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        help="Path to configuration file"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host for the API server"
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the API server"
    )

    parser.add_argument(
        "--cli",
        action="store_true",
        help="Generate one comic without starting the server"
    )

    parser.add_argument(
        "--story", "-s",
        type=str,
        help="Story description (CLI mode)"
    )

    parser.add_argument(
        "--pages",
        type=int,
        default=1,
        help="Number of pages to generate (CLI mode, default: 1)"
    )

    parser.add_argument(
        "--settings",
        type=str,
        help="Path to a projectSettings JSON file (CLI mode)"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        help="Where to write the finished job JSON (CLI mode, default: stdout)"
    )

    args = parser.parse_args()

    if args.debug:
        log_level = LogLevel.DEBUG
    elif args.verbose:
        log_level = LogLevel.INFO
    else:
        log_level = LogLevel.WARNING
    setup_logging(level=log_level, verbose=args.verbose)

    logger = get_logger("main")

    if args.config:
        try:
            set_config(load_config(Path(args.config)))
            logger.info(f"Loaded configuration from {args.config}")
        except ConfigurationError as e:
            print(f"Could not load config: {e}")
            sys.exit(1)

    if args.cli:
        if not args.story:
            parser.error("--story is required with --cli")
        sys.exit(asyncio.run(run_cli(args)))

    from panelsmith.api import run
    run(host=args.host, port=args.port, reload=args.debug, log_level=log_level.name)


async def run_cli(args) -> int:
    """Run one full narrative job in-process and print the finished job."""
    from panelsmith.api.deps import build_services
    from panelsmith.core.models import ProjectSettings
    from panelsmith.jobs.handle import JobHandle
    from panelsmith.pipelines.narrative_pipeline import ComicRequest, FullNarrativePipeline

    logger = get_logger("main")

    settings_data = {}
    if args.settings:
        settings_data = json.loads(Path(args.settings).read_text(encoding="utf-8"))

    services = build_services()
    job = await services.store.create(
        JobType.COMIC,
        {"storyDescription": args.story, "pageCount": args.pages, "projectSettings": settings_data},
    )
    pipeline = FullNarrativePipeline(
        JobHandle(services.store, job.id),
        services.generator,
        services.image_synthesizer,
        services.config,
    )
    result = await pipeline.run(ComicRequest(
        story_description=args.story,
        page_count=args.pages,
        settings=ProjectSettings.from_dict(settings_data),
        aspect_ratio=services.config.pipeline.default_aspect_ratio,
    ))

    finished = await services.store.get(job.id)
    payload = json.dumps(finished.to_dict(), indent=2)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        logger.info(f"Wrote job {job.id} to {args.output}")
    else:
        print(payload)

    if not result.success:
        print(f"\nGeneration failed: {result.error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    main()
