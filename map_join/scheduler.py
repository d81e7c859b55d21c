"""Scheduling and evaluation of index-space cells."""

from __future__ import annotations

import dataclasses
import functools
from typing import Any, Callable, Mapping, Sequence, Tuple

import numpy as np

from ._format import print_summary, report_job
from .index_space import Cell, ProjectionMap, cell_key, project_cell
from .identity import cell_cache_key
from .registry import AxisRegistry, JoinInput
from .runner_protocol import CacheKeyFn, CacheLike, MapFn, UnitResult, WorkUnit
from .runners import map_sequential


@dataclasses.dataclass
class Diagnostics:
    """Cell counts for one join."""

    total_cells: int = 0
    cached_cells: int = 0
    executed_cells: int = 0


@dataclasses.dataclass(frozen=True)
class _UnitContext:
    f: Callable[..., Any]
    inputs: Tuple[JoinInput, ...]
    projection_maps: Tuple[ProjectionMap, ...]
    registry: AxisRegistry
    cache: CacheLike | None
    cache_key_fn: CacheKeyFn
    total: int
    verbose: int


def schedule_units(
    cells: Sequence[Cell], *, shuffle: bool, seed: Any = None
) -> list[WorkUnit]:
    """Pair each cell with its submission slot.

    Shuffling spreads expensive neighbouring cells across workers.
    """
    if shuffle:
        order = [int(i) for i in np.random.default_rng(seed).permutation(len(cells))]
    else:
        order = list(range(len(cells)))
    return [
        WorkUnit(job_index, cell_index, cells[cell_index])
        for job_index, cell_index in enumerate(order)
    ]


def project_arguments(
    inputs: Sequence[JoinInput],
    projection_maps: Sequence[ProjectionMap],
    cell: Cell,
) -> tuple[list[Any], dict[str, Any]]:
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for join_input, projection_map in zip(inputs, projection_maps):
        if join_input.is_scalar:
            value = join_input.value.value
        else:
            value = join_input.value.select(project_cell(projection_map, cell))
        if join_input.name is None:
            args.append(value)
        else:
            kwargs[join_input.name] = value
    return args, kwargs


def _evaluate_unit(context: _UnitContext, unit: WorkUnit) -> UnitResult:
    report_job(unit.job_index + 1, context.total, context.verbose)
    key: str | None = None
    if context.cache is not None:
        key = context.cache_key_fn(cell_key(context.registry, unit.cell))
        found, output = context.cache.load(key)
        if found:
            return UnitResult(unit.cell_index, output, True)
    args, kwargs = project_arguments(context.inputs, context.projection_maps, unit.cell)
    output = context.f(*args, **kwargs)
    if key is not None:
        context.cache.save(key, output)
    return UnitResult(unit.cell_index, output, False)


def run_cells(
    cells: Sequence[Cell],
    inputs: Sequence[JoinInput],
    projection_maps: Sequence[ProjectionMap],
    f: Callable[..., Any],
    *,
    registry: AxisRegistry,
    shuffle: bool = True,
    seed: Any = None,
    cache: CacheLike | None = None,
    cache_key_fn: CacheKeyFn | None = None,
    map_fn: MapFn | None = None,
    map_fn_kwargs: Mapping[str, Any] | None = None,
    verbose: int = 1,
) -> tuple[list[Any], Diagnostics]:
    """Evaluate ``f`` on every cell and return outputs in cell order.

    Errors raised by ``f`` propagate unchanged and abort the run.
    """
    units = schedule_units(cells, shuffle=shuffle, seed=seed)
    context = _UnitContext(
        f=f,
        inputs=tuple(inputs),
        projection_maps=tuple(projection_maps),
        registry=registry,
        cache=cache,
        cache_key_fn=cache_key_fn or cell_cache_key,
        total=len(units),
        verbose=verbose,
    )
    runner = map_fn or map_sequential
    results = runner(
        functools.partial(_evaluate_unit, context),
        units,
        **dict(map_fn_kwargs or {}),
    )

    outputs: list[Any] = [None] * len(cells)
    filled = [False] * len(cells)
    diagnostics = Diagnostics(total_cells=len(cells))
    for cell_index, output, cached in results:
        if filled[cell_index]:
            raise RuntimeError(f"Runner returned cell {cell_index} more than once")
        outputs[cell_index] = output
        filled[cell_index] = True
        if cached:
            diagnostics.cached_cells += 1
        else:
            diagnostics.executed_cells += 1
    missing = filled.count(False)
    if missing:
        raise RuntimeError(f"Runner returned no result for {missing} cells")
    print_summary(diagnostics, verbose)
    return outputs, diagnostics
