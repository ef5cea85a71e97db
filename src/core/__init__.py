"""Core: domain, interfaces, services and configuration."""
