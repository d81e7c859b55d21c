import threading
from typing import Any

from map_join import LabeledArray, vector_as_named_array


def multiply(x, y):
    return x * y


def add(x, y):
    return x + y


def collect_kwargs(**kwargs):
    return dict(kwargs)


def refuse(*args, **kwargs):
    raise AssertionError(f"unexpected call with {args!r} {kwargs!r}")


class CallRecorder:
    """Records the arguments of every call; safe across threads."""

    def __init__(self, func=None):
        self.func = func
        self.calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []
        self._lock = threading.Lock()

    def __call__(self, *args, **kwargs):
        with self._lock:
            self.calls.append((args, kwargs))
        if self.func is None:
            return (args, kwargs)
        return self.func(*args, **kwargs)


def x_input() -> LabeledArray:
    return vector_as_named_array([10, 20], "X", ["a", "b"])


def y_input() -> LabeledArray:
    return vector_as_named_array([1, 2, 3], "Y", [1, 2, 3])


def grid_values(result: LabeledArray) -> list[Any]:
    return result.values.tolist()
