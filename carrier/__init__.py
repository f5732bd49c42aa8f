"""Carrier Challenges - progress scoring and leaderboards for ham radio challenges."""

__version__ = "0.1.0"
