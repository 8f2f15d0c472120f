"""File format readers and writers."""
