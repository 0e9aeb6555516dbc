"""Snake Arena: attested runs and a bounded leaderboard."""

__version__ = "0.1.0"
