"""Domain models and constants.

Pure data structures (Pydantic v2, enums, constants). Nothing here touches
the filesystem, the CLI or the plist library.
"""
