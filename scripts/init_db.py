"""Database initialization script: create tables and seed the demo catalog."""
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import inspect

from stylist.database.db import init_db, engine, SessionLocal
from stylist.database.seed import seed_database
from stylist.analytics.logger import logger

EXPECTED_TABLES = ["users", "products", "sessions", "cart_items", "orders", "order_items"]


def initialize_database(seed: bool = True) -> bool:
    """Create all tables and optionally load the demo data."""
    try:
        logger.info("Initializing database...")
        init_db()
        logger.info("Database tables created/verified")

        existing_tables = inspect(engine).get_table_names()
        logger.info("Database tables:")
        for table in EXPECTED_TABLES:
            if table in existing_tables:
                logger.info(f"  [OK] {table}")
            else:
                logger.warning(f"  [WARN] {table} (missing)")

        if seed:
            db = SessionLocal()
            try:
                seed_database(db)
            finally:
                db.close()

        logger.info("[SUCCESS] Database initialization complete!")
        return True

    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        return False


if __name__ == "__main__":
    success = initialize_database(seed="--no-seed" not in sys.argv)
    sys.exit(0 if success else 1)
