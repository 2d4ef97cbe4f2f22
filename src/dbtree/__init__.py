"""dbtree - database navigation drawer for the terminal."""

__version__ = "0.3.0"
