"""Database access for Cursor Page API."""
