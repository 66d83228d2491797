"""Function definitions and the in-memory collection that owns them.

A :class:`FunctionDefinition` is one row of the function list: a title, a
line color, the raw formula text and the current coefficient values. The
compiler and renderer only read these records. :class:`FunctionCollection`
adds, updates and removes them, and keeps each entry's coefficient mapping in
step with the names its formula uses.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, List, Optional

from .coefficients import coerce_coefficient_values, discover_coefficients, reconcile_coefficients

__all__ = [
    "COLOR_OPTIONS",
    "normalize_color",
    "FunctionDefinition",
    "FunctionCollection",
]

COLOR_OPTIONS: dict[str, str] = {
    "Blue": "1976d2",
    "Red": "d32f2f",
    "Green": "388e3c",
    "Orange": "f57c00",
    "Purple": "7b1fa2",
    "Teal": "00796b",
    "Pink": "c2185b",
    "Brown": "5d4037",
    "Indigo": "303f9f",
    "Lime": "689f38",
}

_UPDATABLE_FIELDS = frozenset({"title", "color", "definition", "coefficients"})


def normalize_color(color: str) -> str:
    """Return ``color`` with a leading ``#``.

    Examples
    --------
    >>> normalize_color("1976d2"), normalize_color("#d32f2f")
    ('#1976d2', '#d32f2f')
    """
    return color if color.startswith("#") else f"#{color}"


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class FunctionDefinition:
    """One plotted function.

    Parameters
    ----------
    id : str
        Opaque identifier, stable for the lifetime of the entry.
    title : str
        Display label.
    color : str
        RGB hex color, with or without the leading ``#``.
    definition : str
        Raw formula text.
    coefficients : Mapping[str, float]
        Current coefficient values by name.
    """

    id: str
    title: str
    color: str
    definition: str = ""
    coefficients: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "coefficients", MappingProxyType(dict(self.coefficients)))

    @property
    def css_color(self) -> str:
        return normalize_color(self.color)

    def __hash__(self) -> int:
        return hash((self.id, self.title, self.color, self.definition, tuple(sorted(self.coefficients.items()))))


class FunctionCollection(Mapping[str, FunctionDefinition]):
    """Ordered, id-keyed collection of :class:`FunctionDefinition` records.

    Entries are immutable; :meth:`update` replaces an entry with a modified
    copy. Iteration follows insertion order.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, FunctionDefinition] = {}
        self._added = 0

    def __getitem__(self, key: str) -> FunctionDefinition:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"FunctionCollection({list(self._entries.values())!r})"

    def add(
        self,
        *,
        title: Optional[str] = None,
        color: Optional[str] = None,
        definition: str = "",
        coefficients: Optional[Mapping[str, Any]] = None,
    ) -> FunctionDefinition:
        """Create a new entry and return it.

        Parameters
        ----------
        title : str, optional
            Defaults to ``"Function N"`` where ``N`` counts additions.
        color : str, optional
            Defaults to the next entry of :data:`COLOR_OPTIONS`.
        definition : str, optional
            Raw formula text.
        coefficients : mapping, optional
            Initial coefficient values; reconciled against the formula.
        """
        palette = list(COLOR_OPTIONS.values())
        index = self._added
        self._added += 1
        entry = FunctionDefinition(
            id=_new_id(),
            title=title if title is not None else f"Function {index + 1}",
            color=color if color is not None else palette[index % len(palette)],
            definition=definition,
            coefficients=reconcile_coefficients(discover_coefficients(definition), coefficients),
        )
        self._entries[entry.id] = entry
        return entry

    def update(self, function_id: str, **updates: Any) -> FunctionDefinition:
        """Replace fields of an entry and return the new record.

        Supported fields are ``title``, ``color``, ``definition`` and
        ``coefficients``. Coefficient values are coerced (text that is not a
        number becomes ``0``) and the mapping is reconciled with the names the
        definition uses: new names start at ``0`` and stale names are dropped.

        Raises
        ------
        KeyError
            If ``function_id`` is unknown.
        TypeError
            If an unsupported field is given.
        """
        unknown = sorted(set(updates) - _UPDATABLE_FIELDS)
        if unknown:
            raise TypeError(f"FunctionCollection.update() got unsupported field(s): {unknown}")

        current = self._entries[function_id]
        if "coefficients" in updates:
            updates["coefficients"] = coerce_coefficient_values(updates["coefficients"] or {})
        entry = replace(current, **updates)
        if "definition" in updates or "coefficients" in updates:
            entry = replace(
                entry,
                coefficients=reconcile_coefficients(
                    discover_coefficients(entry.definition), entry.coefficients
                ),
            )
        self._entries[function_id] = entry
        return entry

    def remove(self, function_id: str) -> FunctionDefinition:
        """Remove an entry and return it.

        Raises
        ------
        KeyError
            If ``function_id`` is unknown.
        """
        return self._entries.pop(function_id)

    def definitions(self) -> List[FunctionDefinition]:
        """Return the entries in insertion order."""
        return list(self._entries.values())
