"""Database initialization script."""

import sys

from greenroute.db.base import Base, engine
from greenroute.models import RoutePreference, SavedRoute  # noqa: F401 - registers tables


def init_database():
    """Create the saved route and preference tables."""
    try:
        print("Creating tables...")
        Base.metadata.create_all(bind=engine)
        print("Database initialized successfully!")
        return 0

    except Exception as e:
        print(f"Error initializing database: {str(e)}")
        return 1


if __name__ == "__main__":
    sys.exit(init_database())
