"""Pull request labeler driven by per-repository title rules."""

__version__ = "0.1.0"
