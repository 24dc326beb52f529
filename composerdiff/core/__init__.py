"""Process-wide plumbing: logging and configuration."""
