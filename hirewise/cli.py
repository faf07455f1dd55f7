"""
Command line entry point: run the HireWise API server.
"""

import argparse
import sys

from hirewise.config import get_settings
from hirewise.db import create_session_factory
from hirewise.utils.logger import get_logger, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hirewise",
        description="HireWise job board and resume API server",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=5001, help="Port to listen on (default: 5001)")
    parser.add_argument("--config", default=None, help="Optional JSON settings file")
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create the database tables and exit",
    )
    return parser


def main(argv=None) -> int:
    """
    Main application entry point.
    """
    args = build_parser().parse_args(argv)

    settings = get_settings(args.config)
    setup_logging(level=settings.log_level, log_file=settings.log_file)
    logger = get_logger(__name__)

    if args.init_db:
        create_session_factory(settings.storage.database_url, create_tables=True)
        logger.info("✅ Database tables created")
        return 0

    # Imported late so --init-db does not need the AI clients
    from hirewise.api import create_app

    app = create_app(settings)

    print("\n" + "=" * 70)
    print("💼 HIREWISE - JOB BOARD & RESUME API")
    print("=" * 70)
    print(f"🌐 Serving at http://{args.host}:{args.port}/api")
    print(f"🤖 AI model: {settings.ai_settings.model} ({'enabled' if settings.ai_settings.enabled else 'disabled'})")
    print("   Press Ctrl+C to stop\n")

    app.run(debug=settings.debug, host=args.host, port=args.port, use_reloader=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
