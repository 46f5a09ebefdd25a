"""HTTP API and CLI for the approval engine."""
