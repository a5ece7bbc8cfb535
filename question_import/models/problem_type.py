from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

"""Problem type directory snapshot.

The directory itself lives outside this package (see db/directory.py for the
PostgreSQL adapter). One snapshot is taken per load and never changes for
the lifetime of that load.
"""

__all__ = [
    "ProblemType",
    "ProblemTypeSnapshot",
]


@dataclass(frozen=True)
class ProblemType:
    id: str
    name: str


@dataclass(frozen=True)
class ProblemTypeSnapshot:
    """Immutable name -> ProblemType lookup, in directory order."""
    types: tuple[ProblemType, ...] = ()
    _by_name: Mapping[str, ProblemType] = field(init=False, repr=False, compare=False)
    _by_id: Mapping[str, ProblemType] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_name: dict[str, ProblemType] = {}
        by_id: dict[str, ProblemType] = {}
        for pt in self.types:
            # 이름 중복 시 첫 번째 항목 우선
            by_name.setdefault(pt.name, pt)
            by_id.setdefault(pt.id, pt)
        object.__setattr__(self, "_by_name", MappingProxyType(by_name))
        object.__setattr__(self, "_by_id", MappingProxyType(by_id))

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> ProblemTypeSnapshot:
        """Build a snapshot from ``(id, name)`` pairs."""
        return cls(tuple(ProblemType(id=str(i), name=str(n)) for i, n in pairs))

    def resolve(self, name: str | None) -> ProblemType | None:
        if not name:
            return None
        return self._by_name.get(name.strip())

    def by_id(self, type_id: str | None) -> ProblemType | None:
        if not type_id:
            return None
        return self._by_id.get(type_id)

    def __iter__(self) -> Iterator[ProblemType]:
        return iter(self.types)

    def __len__(self) -> int:
        return len(self.types)
