"""Interfaces/abstractions of the Core.

Contracts (Protocol) that user objects implement to take part in archiving.
"""
