"""Command-line tools: manual import, dry-run detection and shared argument types."""
