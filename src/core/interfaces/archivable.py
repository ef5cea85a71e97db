"""Contract for user-defined objects that can be keyed-archived.

A structural Protocol: any object exposing `archive_classes` and
`archive_fields` is accepted by the archiver, no base class required.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, runtime_checkable


@runtime_checkable
class KeyedArchivable(Protocol):
    """Minimal contract for a custom archived class.

    Rules:
    - `archive_classes` is the class chain, most specific first
      (e.g. `("DTXMessage", "NSObject")`); the first entry is `$classname`.
    - `archive_fields` maps field names to values. Keys must not start
      with `$`.
    """

    archive_classes: Sequence[str]

    def archive_fields(self) -> Mapping[str, Any]:
        """Return the fields to store for this object."""

        ...
