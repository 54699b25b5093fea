"""Periodic recruiter scoring and slot budget adjustment."""

__version__ = "0.1.0"
