"""HTTP API for the Markdown Attribution Alignment Engine."""
