"""SQLAlchemy async implementations of the store protocols."""
