"""Stage type and process templates."""
