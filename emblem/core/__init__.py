"""Core engine: data types, errors, events and configuration."""
