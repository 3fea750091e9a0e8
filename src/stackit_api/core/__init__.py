"""Core configuration, errors and permissions."""
