import threading
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

_thread_local = threading.local()


@dataclass
class _ProgressTracker:
    last_len: int = 0
    last_msg: str = ""

    def print_progress(self, message: str, *, final: bool) -> None:
        if final:
            print(message, end="\n", flush=True)
            self.last_len = 0
            self.last_msg = ""
            return
        pad = max(self.last_len - len(message), 0)
        print(message + (" " * pad), end="\r", flush=True)
        self.last_len = len(message)
        self.last_msg = message

    def print_detail(self, message: str) -> None:
        if self.last_len:
            print()
        print(message)
        if self.last_msg:
            print(self.last_msg, end="\r", flush=True)
            self.last_len = len(self.last_msg)


def _tracker() -> _ProgressTracker:
    if not hasattr(_thread_local, "tracker"):
        _thread_local.tracker = _ProgressTracker()
    return _thread_local.tracker


def print_progress(message: str, *, final: bool) -> None:
    _tracker().print_progress(message, final=final)


def print_detail(message: str) -> None:
    _tracker().print_detail(message)


def is_progress_step(job_number: int) -> bool:
    """True for 1..9, 10, 20, .., 90, 100, 200, ..: one significant digit."""
    if job_number <= 0:
        return False
    return len(str(job_number).rstrip("0")) == 1


def format_progress(job_number: int, total: int) -> str:
    return f"[MapJoin] {job_number}/{total}"


def report_job(job_number: int, total: int, verbose: int) -> None:
    if verbose < 1:
        return
    final = job_number == total
    if not final and not is_progress_step(job_number):
        return
    print_progress(format_progress(job_number, total), final=final)


def format_axis_values(values: Any) -> str:
    if isinstance(values, (list, tuple)):
        if len(values) <= 4:
            inner = ", ".join(repr(value) for value in values)
            return f"[{inner}]"
        head = ", ".join(repr(value) for value in values[:2])
        tail = ", ".join(repr(value) for value in values[-2:])
        return f"[{head}, ..., {tail}]"
    return repr(values)


def format_axes(axis_labels: Mapping[str, Sequence[str]]) -> list[str]:
    lines = ["[MapJoin] axes:"]
    if not axis_labels:
        lines.append("  (none)")
        return lines
    for name, labels in axis_labels.items():
        lines.append(f"  {name}({len(labels)})={format_axis_values(tuple(labels))}")
    return lines


def build_plan_lines(
    axis_labels: Mapping[str, Sequence[str]],
    input_labels: Sequence[str],
    cached_count: int | None,
    total_count: int,
) -> list[str]:
    lines = [f"[MapJoin] inputs: {', '.join(input_labels) or '(none)'}"]
    lines.extend(format_axes(axis_labels))
    if cached_count is None:
        lines.append(f"[MapJoin] plan: cells={total_count} cache=off")
    else:
        lines.append(
            f"[MapJoin] plan: cells={total_count} cached={cached_count} "
            f"execute={total_count - cached_count}"
        )
    return lines


def print_summary(diagnostics: Any, verbose: int) -> None:
    if verbose >= 2:
        print_detail(
            "[MapJoin] summary "
            f"cached={diagnostics.cached_cells} "
            f"executed={diagnostics.executed_cells} "
            f"total={diagnostics.total_cells}"
        )
