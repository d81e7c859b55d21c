"""Runner protocols and the work-unit shape."""

from __future__ import annotations

from typing import Any, Callable, Iterable, NamedTuple, Protocol, Tuple, TypedDict

from .index_space import Cell, CellKey

CacheKeyFn = Callable[[CellKey], str]


class CacheStatus(TypedDict):
    """Which cells of a join already have cache entries."""

    axis_labels: dict[str, Tuple[str, ...]]
    total_cells: int
    cached_cells: list[CellKey]
    missing_cells: list[CellKey]


class WorkUnit(NamedTuple):
    """One cell scheduled for evaluation.

    ``job_index`` is the submission position, ``cell_index`` the position of
    ``cell`` in the index space.
    """

    job_index: int
    cell_index: int
    cell: Cell


class UnitResult(NamedTuple):
    cell_index: int
    output: Any
    cached: bool


class MapFn(Protocol):
    """Runs ``func`` once per item and returns the results.

    Results may come back in any order; each carries its cell index.
    """

    def __call__(
        self, func: Callable[[Any], Any], items: Iterable[Any], **kwargs: Any
    ) -> Iterable[Any]: ...


class CacheLike(Protocol):
    """Cache store interface consumed by the scheduler."""

    def contains(self, key: str) -> bool: ...

    def load(self, key: str) -> Tuple[bool, Any]: ...

    def save(self, key: str, output: Any) -> Any: ...
