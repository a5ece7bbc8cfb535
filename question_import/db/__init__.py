"""PostgreSQL adapters for the question store and problem type directory."""
