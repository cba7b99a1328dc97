"""Quote story renderer - command line entry point."""

import argparse
import sys
from pathlib import Path

from .config import AspectRatio, settings
from .errors import StoryGenerationError
from .utils import get_logger, setup_logging

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Quote story renderer - book cover + quote -> story image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m quotestory.main                                  # Serve HTTP on HOST:PORT
  python -m quotestory.main serve --port 8080                # Serve on another port
  python -m quotestory.main render --cover cover.jpg --quote "So it goes."
  python -m quotestory.main render --cover cover.jpg --quote-file quote.txt --aspect-ratio 2:1
        """,
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default=settings.host, help="Bind address")
    serve.add_argument("--port", type=int, default=settings.port, help="Bind port")

    render = sub.add_parser("render", help="Render one story image to a file")
    render.add_argument("--cover", type=Path, required=True, help="Cover image path")
    quote = render.add_mutually_exclusive_group(required=True)
    quote.add_argument("--quote", help="Quote text")
    quote.add_argument("--quote-file", type=Path, help="Read the quote from a UTF-8 text file")
    render.add_argument(
        "--aspect-ratio",
        default=settings.default_aspect_ratio,
        choices=[r.value for r in AspectRatio],
        help="Canvas format (default: %(default)s)",
    )
    render.add_argument(
        "--output",
        type=Path,
        default=Path("story.png"),
        help="Output PNG path (default: %(default)s)",
    )
    render.add_argument("--font", help="Override FONT_PATH for this render")

    return parser.parse_args(argv)


def run_render(args: argparse.Namespace) -> int:
    """
    Render a single story image from local files.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success)
    """
    from .pipeline import StoryRenderer

    quote = args.quote if args.quote is not None else args.quote_file.read_text(encoding="utf-8")
    image_bytes = args.cover.read_bytes() if args.cover.exists() else b""
    if not image_bytes:
        logger.warning(f"Cover {args.cover} is missing or empty")

    try:
        png = StoryRenderer(font_path=args.font).render(image_bytes, quote, args.aspect_ratio)
    except StoryGenerationError as e:
        logger.error(f"{e.code}: {e.message}")
        return 1

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_bytes(png)
    logger.info(f"Wrote {args.output}")
    return 0


def run_server(host: str, port: int) -> int:
    """Serve the HTTP API until interrupted."""
    import uvicorn

    from .api import create_app

    logger.info(f"Quote story renderer running on http://{host}:{port}")
    uvicorn.run(create_app(), host=host, port=port, log_config=None)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    log_level = "DEBUG" if args.debug else settings.log_level
    setup_logging(level=log_level)

    logger.debug(f"Arguments: {args}")

    if args.command == "render":
        return run_render(args)
    if args.command == "serve":
        return run_server(args.host, args.port)
    return run_server(settings.host, settings.port)


if __name__ == "__main__":
    sys.exit(main())
