"""Row-oriented measurement records written as semicolon-separated text."""

from __future__ import annotations

from typing import Any

DELIMITER = ";"


def _stream_format(value: Any) -> str:
    """Format a value the way a default text stream prints it."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _to_string(value: Any) -> str:
    """Format a number in fixed notation with six decimals for floats."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return f"{value:f}"
    return str(value)


class PairMeasurement:
    """Measurement rows coupled with dynamic simulation information."""

    DELIMITER = DELIMITER

    def __init__(self, owner_id: str, *keys: str) -> None:
        self.owner_id = owner_id
        self.keys = list(keys)
        self.cache: dict[str, Any] = {}
        self._data: list[str] = []

    def add_value_pairs(self, *args: Any) -> None:
        """Append one row of values."""
        self._data.append("".join(_stream_format(arg) + DELIMITER for arg in args))

    def add_values_from_cache(self, value: Any, *args: str) -> None:
        """Append a row made of value and the cached entries named by args.

        The cache itself is left as it is.
        """
        parts = [_stream_format(value)]
        for name in args:
            cached = self.cache.setdefault(name, None)
            if cached is None:
                parts.append("")
            elif isinstance(cached, list):
                parts.append("".join(_stream_format(item) + "," for item in cached))
            else:
                parts.append(_to_string(cached))
        self._data.append("".join(part + DELIMITER for part in parts))

    def clear_data(self) -> None:
        """Drop all recorded rows."""
        self._data = []

    def render(self) -> str:
        """All rows, each prefixed with the owner id."""
        return "".join(f"{self.owner_id}{DELIMITER}{line}\n" for line in self._data)

    def __str__(self) -> str:
        return self.render()


class HistogramMeasurement:
    """Measurement columns that agglomerate values over time."""

    DELIMITER = DELIMITER

    def __init__(self, owner_id: str, *keys: str) -> None:
        self.owner_id = owner_id
        self.keys = list(keys)
        self.cache: dict[str, Any] = {}
        self._data: dict[str, list[Any]] = {}

    def add_values(self, *args: tuple[str, Any]) -> None:
        """Append each (key, value) pair to its column."""
        for key, value in args:
            self._data.setdefault(key, []).append(value)

    def add_values_from_cache(self, *args: str) -> None:
        """Move the cached value of each named column into that column."""
        for key in args:
            self._data.setdefault(key, []).append(self.cache.get(key))
            self.cache[key] = None

    def clear_data(self) -> None:
        """Drop all recorded values."""
        self._data = {}

    def render(self) -> str:
        """Columns laid out row by row, each row prefixed with the owner id."""
        if not self._data:
            return ""
        columns = [self._data.get(key, []) for key in self.keys]
        max_size = max((len(column) for column in columns), default=0)
        lines = []
        for row in range(max_size):
            cells = [self.owner_id]
            for column in columns:
                if row < len(column):
                    cell = column[row]
                    cells.append("" if cell is None else _to_string(cell))
                else:
                    cells.append("")
            lines.append(DELIMITER.join(cells) + DELIMITER + "\n")
        return "".join(lines)

    def __str__(self) -> str:
        return self.render()