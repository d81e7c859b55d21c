import operator

import pytest  # type: ignore[import-not-found]

from map_join import (
    MapJoin,
    WorkUnit,
    map_join,
    map_process_pool,
    map_sequential,
    map_thread_pool,
)
from map_join.runners import resolve_map_fn, resolve_map_kwargs
from map_join.scheduler import schedule_units

from .utils import CallRecorder, grid_values, multiply, x_input, y_input


def _reversed_map(func, items, **kwargs):
    return [func(item) for item in reversed(list(items))]


def test_sequential_map():
    assert map_sequential(lambda x: x + 1, [1, 2, 3]) == [2, 3, 4]


def test_thread_pool_matches_sequential():
    recorder = CallRecorder(multiply)
    result = map_join(
        recorder,
        x_input(),
        y_input(),
        map_fn=map_thread_pool,
        map_fn_kwargs={"max_workers": 4},
        verbose=0,
    )
    assert len(recorder.calls) == 6
    assert grid_values(result) == [[10, 20, 30], [20, 40, 60]]


def test_process_pool_matches_sequential():
    result = map_join(operator.mul, x_input(), y_input(), max_workers=2, verbose=0)
    assert grid_values(result) == [[10, 20, 30], [20, 40, 60]]


def test_process_pool_with_chunksize():
    result = map_join(
        operator.mul,
        x_input(),
        y_input(),
        map_fn=map_process_pool,
        map_fn_kwargs={"max_workers": 2, "chunksize": 2},
        verbose=0,
    )
    assert result.sel(X="b", Y=1) == 20


def test_process_pool_rejects_local_functions():
    def local_multiply(x, y):
        return x * y

    with pytest.raises(ValueError, match="top-level function"):
        map_join(local_multiply, x_input(), y_input(), max_workers=2, verbose=0)
    with pytest.raises(ValueError, match="top-level function"):
        map_join(lambda x, y: x, x_input(), y_input(), max_workers=2, verbose=0)


def test_results_are_placed_by_cell_index():
    result = map_join(
        multiply, x_input(), y_input(), map_fn=_reversed_map, shuffle=False, verbose=0
    )
    assert grid_values(result) == [[10, 20, 30], [20, 40, 60]]


def test_runner_missing_results_is_an_error():
    def drop_last(func, items, **kwargs):
        return [func(item) for item in list(items)[:-1]]

    with pytest.raises(RuntimeError, match="no result for 1 cells"):
        MapJoin(map_fn=drop_last, verbose=0).run(multiply, [x_input(), y_input()])


def test_runner_duplicate_results_is_an_error():
    def repeat_first(func, items, **kwargs):
        items = list(items)
        return [func(items[0])] + [func(item) for item in items]

    with pytest.raises(RuntimeError, match="more than once"):
        MapJoin(map_fn=repeat_first, verbose=0).run(multiply, [x_input(), y_input()])


def test_schedule_units_without_shuffle():
    cells = [(0,), (1,), (2,)]
    assert schedule_units(cells, shuffle=False) == [
        WorkUnit(0, 0, (0,)),
        WorkUnit(1, 1, (1,)),
        WorkUnit(2, 2, (2,)),
    ]


def test_schedule_units_shuffle_is_a_seeded_permutation():
    cells = [(i,) for i in range(50)]
    first = schedule_units(cells, shuffle=True, seed=3)
    again = schedule_units(cells, shuffle=True, seed=3)
    assert first == again
    assert [unit.job_index for unit in first] == list(range(50))
    assert sorted(unit.cell_index for unit in first) == list(range(50))
    assert all(cells[unit.cell_index] == unit.cell for unit in first)


def test_resolve_map_fn_defaults():
    assert resolve_map_fn(None, 1, multiply) is map_sequential
    assert resolve_map_fn(None, 3, multiply) is map_process_pool
    assert resolve_map_fn(_reversed_map, 3, multiply) is _reversed_map


def test_resolve_map_kwargs_adds_worker_count():
    assert resolve_map_kwargs(None, 1) == {}
    assert resolve_map_kwargs({"chunksize": 4}, 3) == {"chunksize": 4, "max_workers": 3}
    assert resolve_map_kwargs({"max_workers": 2}, 3) == {"max_workers": 2}
