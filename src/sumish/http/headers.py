"""Request headers as a read-only, case-insensitive mapping.

A ``Request`` reads ``content-type``, ``accept-encoding`` and ``cookie``
through this type. Headers arrive either as the ASGI scope's byte pairs
or, from ``Request.build`` and the test client, as a plain dict.
"""

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Header name (lowercased) to value, decoded once as latin-1.

    A header sent more than once keeps every value in arrival order:
    indexing gives the first, ``get_list`` gives them all.
    """

    __slots__ = ("_values",)

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        values: dict[str, list[str]] = {}
        for name, value in raw:
            values.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        self._values = values

    @classmethod
    def from_dict(cls, headers: Mapping[str, str]) -> "Headers":
        return cls(
            (name.encode("latin-1"), value.encode("latin-1")) for name, value in headers.items()
        )

    def __getitem__(self, key: str) -> str:
        values = self._values.get(key.lower())
        if not values:
            raise KeyError(key)
        return values[0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Headers({self._values!r})"

    def get_list(self, key: str) -> list[str]:
        """Every value sent for *key*, or an empty list."""
        return list(self._values.get(key.lower(), ()))
