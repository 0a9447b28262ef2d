"""actionscan: recursive dependency scanner for GitHub Actions."""

__version__ = "1.0.0"
