"""Unix-style tools (grep, wc, cat, echo, ls, mkfs) and small operating-system building blocks."""

__version__ = "0.1.0"