"""Database readers and writers."""
