"""Adapters: plist containers, files on disk and JSON output."""
