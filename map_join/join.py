"""Public entry points for mapping a function over joined array-likes."""

from __future__ import annotations

import dataclasses
import functools
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

from ._format import build_plan_lines, print_detail
from .assemble import assemble
from .cache import CacheStore
from .identity import cell_cache_key
from .index_space import (
    Cell,
    ProjectionMap,
    build_projection_maps,
    cell_key,
    enumerate_cells,
)
from .registry import (
    AxisRegistry,
    JoinInput,
    MismatchPolicy,
    build_registry,
    normalize_inputs,
)
from .runner_protocol import CacheKeyFn, CacheLike, CacheStatus, MapFn
from .runners import resolve_map_fn, resolve_map_kwargs
from .scheduler import Diagnostics, run_cells


@dataclasses.dataclass
class JoinPlan:
    """Everything computed before any cell is evaluated."""

    inputs: list[JoinInput]
    registry: AxisRegistry
    cells: list[Cell]
    projection_maps: list[ProjectionMap]


class MapJoin:
    """Maps a function over the natural join of array-like inputs.

    Each input contributes its named axes; inputs sharing an axis name are
    aligned on it, and the result is indexed by every axis seen. ``f`` is
    called once per combination of axis positions, with one element from
    each input: unnamed inputs positionally, named inputs by keyword.
    Inputs wrapped with ``no_join`` are passed whole to every call.
    """

    def __init__(
        self,
        *,
        mismatch_policy: MismatchPolicy = "fail",
        map_fn: MapFn | None = None,
        map_fn_kwargs: Mapping[str, Any] | None = None,
        max_workers: int = 1,
        shuffle: bool = True,
        seed: Any = None,
        cache: CacheLike | str | Path | None = None,
        cache_key_fn: CacheKeyFn | None = None,
        strict_scalars: bool = True,
        verbose: int = 1,
    ) -> None:
        if max_workers < 1:
            raise ValueError("'max_workers' must be >= 1")
        self.mismatch_policy = mismatch_policy
        self.map_fn = map_fn
        self.map_fn_kwargs = dict(map_fn_kwargs or {})
        self.max_workers = max_workers
        self.shuffle = shuffle
        self.seed = seed
        self.cache = _resolve_cache(cache)
        self.cache_key_fn = cache_key_fn or cell_cache_key
        self.strict_scalars = strict_scalars
        self.verbose = verbose

    def plan(
        self,
        arraylike_args: Mapping[str, Any] | Sequence[Any],
        named_args: Mapping[str, Any] | None = None,
    ) -> JoinPlan:
        inputs = normalize_inputs(
            arraylike_args, named_args, strict_scalars=self.strict_scalars
        )
        registry = build_registry(inputs, self.mismatch_policy)
        return JoinPlan(
            inputs=inputs,
            registry=registry,
            cells=enumerate_cells(registry),
            projection_maps=build_projection_maps(registry, inputs),
        )

    def run(
        self,
        f: Callable[..., Any],
        arraylike_args: Mapping[str, Any] | Sequence[Any],
        named_args: Mapping[str, Any] | None = None,
    ) -> tuple[Any, Diagnostics]:
        plan = self.plan(arraylike_args, named_args)
        map_fn = resolve_map_fn(self.map_fn, self.max_workers, f)
        if self.verbose >= 2:
            self._print_plan(plan)
        outputs, diagnostics = run_cells(
            plan.cells,
            plan.inputs,
            plan.projection_maps,
            f,
            registry=plan.registry,
            shuffle=self.shuffle,
            seed=self.seed,
            cache=self.cache,
            cache_key_fn=self.cache_key_fn,
            map_fn=map_fn,
            map_fn_kwargs=resolve_map_kwargs(self.map_fn_kwargs, self.max_workers),
            verbose=self.verbose,
        )
        return assemble(plan.registry, outputs), diagnostics

    def __call__(self, f: Callable[..., Any], /, *args: Any, **named: Any) -> Any:
        result, _ = self.run(f, args, named)
        return result

    def cache_status(
        self,
        arraylike_args: Mapping[str, Any] | Sequence[Any],
        named_args: Mapping[str, Any] | None = None,
    ) -> CacheStatus:
        if self.cache is None:
            raise ValueError("cache_status requires a cache")
        plan = self.plan(arraylike_args, named_args)
        cached: list[Any] = []
        missing: list[Any] = []
        for cell in plan.cells:
            key = cell_key(plan.registry, cell)
            if self.cache.contains(self.cache_key_fn(key)):
                cached.append(key)
            else:
                missing.append(key)
        return {
            "axis_labels": dict(plan.registry.axis_labels),
            "total_cells": len(plan.cells),
            "cached_cells": cached,
            "missing_cells": missing,
        }

    def wrap(self) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator mapping the wrapped function over its array-like arguments."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            @functools.wraps(func)
            def wrapper(*args: Any, **named: Any) -> Any:
                result, _ = self.run(func, args, named)
                return result

            def cache_status(*args: Any, **named: Any) -> CacheStatus:
                return self.cache_status(args, named)

            setattr(wrapper, "cache_status", cache_status)
            return wrapper

        return decorator

    def _print_plan(self, plan: JoinPlan) -> None:
        cached_count = None
        if self.cache is not None:
            cached_count = sum(
                1
                for cell in plan.cells
                if self.cache.contains(self.cache_key_fn(cell_key(plan.registry, cell)))
            )
        lines = build_plan_lines(
            plan.registry.axis_labels,
            [join_input.label for join_input in plan.inputs],
            cached_count,
            len(plan.cells),
        )
        for line in lines:
            print_detail(line)


def map_join_(
    f: Callable[..., Any],
    arraylike_args: Mapping[str, Any] | Sequence[Any],
    *,
    mismatch_policy: MismatchPolicy = "fail",
    map_fn: MapFn | None = None,
    map_fn_kwargs: Mapping[str, Any] | None = None,
    max_workers: int = 1,
    shuffle: bool = True,
    seed: Any = None,
    cache: CacheLike | str | Path | None = None,
    cache_key_fn: CacheKeyFn | None = None,
    strict_scalars: bool = True,
    verbose: int = 1,
) -> Any:
    """Map ``f`` over the join of ``arraylike_args``.

    ``arraylike_args`` is a mapping of named inputs or a sequence of unnamed
    ones. Returns a ``LabeledArray`` of outputs, or the single output when
    no input has axes.
    """
    mapper = MapJoin(
        mismatch_policy=mismatch_policy,
        map_fn=map_fn,
        map_fn_kwargs=map_fn_kwargs,
        max_workers=max_workers,
        shuffle=shuffle,
        seed=seed,
        cache=cache,
        cache_key_fn=cache_key_fn,
        strict_scalars=strict_scalars,
        verbose=verbose,
    )
    result, _ = mapper.run(f, arraylike_args)
    return result


def map_join(
    f: Callable[..., Any],
    /,
    *args: Any,
    mismatch_policy: MismatchPolicy = "fail",
    map_fn: MapFn | None = None,
    map_fn_kwargs: Mapping[str, Any] | None = None,
    max_workers: int = 1,
    shuffle: bool = True,
    seed: Any = None,
    cache: CacheLike | str | Path | None = None,
    cache_key_fn: CacheKeyFn | None = None,
    strict_scalars: bool = True,
    verbose: int = 1,
    **named: Any,
) -> Any:
    """Like ``map_join_`` with inputs given as arguments.

    Keyword inputs may not reuse the option names.
    """
    mapper = MapJoin(
        mismatch_policy=mismatch_policy,
        map_fn=map_fn,
        map_fn_kwargs=map_fn_kwargs,
        max_workers=max_workers,
        shuffle=shuffle,
        seed=seed,
        cache=cache,
        cache_key_fn=cache_key_fn,
        strict_scalars=strict_scalars,
        verbose=verbose,
    )
    result, _ = mapper.run(f, args, named)
    return result


def _resolve_cache(cache: CacheLike | str | Path | None) -> CacheLike | None:
    if cache is None:
        return None
    if isinstance(cache, (str, Path)):
        return CacheStore.from_prefix(cache)
    return cache
