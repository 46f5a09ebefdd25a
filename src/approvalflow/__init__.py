"""Approval workflow engine for task sign-off."""

__version__ = "1.0.0"
