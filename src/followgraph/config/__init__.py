"""Configuration — settings models, project discovery, and logging setup."""
