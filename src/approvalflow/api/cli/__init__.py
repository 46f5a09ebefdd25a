"""Approvalflow command line interface."""
