"""Generic async repository and specification pattern over SQLAlchemy."""

__version__ = "0.1.0"
