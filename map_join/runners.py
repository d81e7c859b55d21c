"""Map functions used to fan work units out."""

from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from typing import Any, Callable, Iterable, Mapping

from .runner_protocol import MapFn


def map_sequential(
    func: Callable[[Any], Any], items: Iterable[Any], **kwargs: Any
) -> list[Any]:
    return [func(item) for item in items]


def map_thread_pool(
    func: Callable[[Any], Any], items: Iterable[Any], **kwargs: Any
) -> list[Any]:
    max_workers = kwargs.get("max_workers")
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(func, items))


def map_process_pool(
    func: Callable[[Any], Any], items: Iterable[Any], **kwargs: Any
) -> list[Any]:
    max_workers = kwargs.get("max_workers")
    chunksize = kwargs.get("chunksize")
    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        if chunksize is None:
            return list(executor.map(func, items))
        return list(executor.map(func, items, chunksize=chunksize))


def resolve_map_fn(
    map_fn: MapFn | None, max_workers: int, f: Callable[..., Any]
) -> MapFn:
    if map_fn is not None:
        return map_fn
    if max_workers > 1:
        _require_top_level_function(f)
        return map_process_pool
    return map_sequential


def resolve_map_kwargs(
    map_fn_kwargs: Mapping[str, Any] | None, max_workers: int
) -> dict[str, Any]:
    resolved = dict(map_fn_kwargs or {})
    if max_workers > 1 and "max_workers" not in resolved:
        resolved["max_workers"] = max_workers
    return resolved


def _require_top_level_function(func: Callable[..., Any]) -> None:
    qualname = getattr(func, "__qualname__", "")
    if "<locals>" in qualname or "<lambda>" in qualname:
        raise ValueError(
            "Parallel execution requires a top-level function (module scope) so it can be "
            "pickled for ProcessPoolExecutor. Move the function to module scope or pass a "
            "custom map_fn that does not require pickling."
        )
