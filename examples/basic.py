import operator
import tempfile
from pathlib import Path

import numpy as np

from map_join import (
    CacheStore,
    LabeledArray,
    MapJoin,
    map_join,
    map_join_,
    no_join,
    vector_as_named_array,
    with_axis_names,
)


def describe(A, B, D, F):
    return {"A": int(A), "B": float(B), "D": D, "F": int(F)}


def grid_inputs():
    return [
        vector_as_named_array([2, 3], "A", ["a", "b"]),
        with_axis_names([1, 2, 3], ["B"]),
    ]


def main():
    print("Scalars:", map_join(operator.mul, no_join(2), no_join(3), verbose=0))

    outer = map_join(
        operator.mul,
        with_axis_names([2, 3], ["A"]),
        with_axis_names([1, 2, 3], ["B"]),
        verbose=0,
    )
    print("Outer product:", outer, outer.astype(float).values.tolist())

    inputs = {
        "A": LabeledArray(
            np.arange(24).reshape(2, 3, 4),
            ["DA", "DB", "DC"],
            [["S1", "S2"], [1, 2, 3], [1, 2, 3, 4]],
        ),
        "B": vector_as_named_array([2.0, 2.1], "DA", ["S1", "S2"]),
        "D": no_join(142),
        "F": vector_as_named_array([11, 12, 13, 14], "DC", [1, 2, 3, 4]),
    }
    joined = map_join_(describe, inputs, verbose=0)
    print("Joined cell:", joined.sel(DA="S1", DB=1, DC=1))

    with tempfile.TemporaryDirectory() as temp_dir:
        store = CacheStore.open(Path(temp_dir), "outer_product")
        mapper = MapJoin(cache=store, max_workers=2, verbose=2)
        result, diag = mapper.run(operator.mul, grid_inputs())
        print("Cold run:", result.astype(float).values.tolist(), diag)
        _, diag = mapper.run(operator.mul, grid_inputs())
        print("Warm run:", diag)
        print("Cache keys:", store.keys())


if __name__ == "__main__":
    main()
