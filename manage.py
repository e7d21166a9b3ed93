"""
Management commands.

    python manage.py serve           run the API server with uvicorn
    python manage.py init-db         create any missing tables
    python manage.py recount-posts   recompute every author's post counter
"""

import argparse
import logging
import sys

import uvicorn

from starterblog.core.config import settings
from starterblog.db.init_db import create_all_tables
from starterblog.db.session import Database
from starterblog.modules.user_management.services.user import recount_posts

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("manage")


def serve(args) -> None:
    """Run the API server"""
    use_reload = args.reload or settings.DEBUG
    logger.info(f"Starting {settings.PROJECT_NAME} in {settings.ENVIRONMENT} mode on {args.host}:{args.port}")
    if use_reload:
        logger.info("Auto-reload enabled")
    uvicorn.run("starterblog.main:app", host=args.host, port=args.port, reload=use_reload)


def init_db(args) -> None:
    """Create database tables"""
    database = Database(args.database_url)
    try:
        create_all_tables(database.engine)
    finally:
        database.dispose()
    logger.info("Database tables are up to date")


def recount(args) -> None:
    """Recompute post counters from the posts table"""
    database = Database(args.database_url)
    db = database.session()
    try:
        corrected = recount_posts(db)
    finally:
        db.close()
        database.dispose()
    logger.info(f"Post counters checked, {corrected} corrected")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="StarterBlog management commands")
    parser.add_argument(
        "--database-url",
        default=settings.DATABASE_URL,
        help="Database to operate on (default: DATABASE_URL setting)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Interface to bind (default: 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on (default: 8000)")
    serve_parser.add_argument(
        "--reload", action="store_true", help="Reload on code changes (always on when DEBUG is set)"
    )
    serve_parser.set_defaults(func=serve)

    init_parser = subparsers.add_parser("init-db", help="Create database tables")
    init_parser.set_defaults(func=init_db)

    recount_parser = subparsers.add_parser("recount-posts", help="Recompute author post counters")
    recount_parser.set_defaults(func=recount)

    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        args.func(args)
    except Exception as e:
        logger.error(f"Command {args.command} failed: {e}")
        raise
    return 0


if __name__ == "__main__":
    sys.exit(main())
