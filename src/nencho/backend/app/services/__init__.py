"""Domain services backing the HTTP routes."""
