"""One-shot command-line scripts."""
