import argparse
import logging
from config.settings import LOG_LEVEL, LOG_FORMAT, OUTPUT_DIR, ensure_directories
from database.db import init_db
from processors.templates import TemplateBuilder

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format=LOG_FORMAT
)
logger = logging.getLogger(__name__)


def init():
    """Create output folders and the local archive database"""
    logger.info("Initializing output directories under %s", OUTPUT_DIR)
    ensure_directories()
    logger.info("Initializing database...")
    init_db()
    logger.info("Console initialized successfully")


def templates():
    """Write the bulk-import templates to OUTPUT_DIR/templates"""
    paths = TemplateBuilder().write_all()
    for path in paths:
        print(f"  {path}")
    return paths


def main(argv=None):
    """Entry point for the HR console maintenance commands"""
    parser = argparse.ArgumentParser(description="HR payroll console maintenance")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("init", help="create output folders and the archive database")
    sub.add_parser("templates", help="write bulk-import Excel templates")
    args = parser.parse_args(argv)

    if args.command == "init":
        init()
    elif args.command == "templates":
        ensure_directories()
        print("=" * 60)
        print("Bulk-import templates")
        print("=" * 60)
        templates()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
