"""Core layer: domain models, pure decision logic and collaborator protocols."""
