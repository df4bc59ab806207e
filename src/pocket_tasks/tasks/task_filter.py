# src/pocket_tasks/tasks/task_filter.py

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .task_models import Task

ALL_CATEGORIES = "All"


def task_matches(task: Task, query: str, category: str) -> bool:
    needle = (query or "").lower()
    if needle and needle not in task.title.lower():
        return False
    return category == ALL_CATEGORIES or task.category == category


class FilteredView:
    """
    Lazy, restartable filtered view over a snapshot of tasks.

    Each iteration re-applies the predicate to the captured snapshot, so the
    view can be walked any number of times and keeps the source order.
    """

    __slots__ = ("_tasks", "query", "category")

    def __init__(self, tasks: Iterable[Task], query: str = "", category: str = ALL_CATEGORIES) -> None:
        self._tasks = tuple(tasks)
        self.query = query or ""
        self.category = category

    def __iter__(self) -> Iterator[Task]:
        return (t for t in self._tasks if task_matches(t, self.query, self.category))

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return any(True for _ in self)

    def __repr__(self) -> str:
        return f"FilteredView(query={self.query!r}, category={self.category!r})"


def filter_tasks(tasks: Iterable[Task], query: str = "", category: str = ALL_CATEGORIES) -> FilteredView:
    return FilteredView(tasks, query, category)


def available_categories(tasks: Iterable[Task]) -> set[str]:
    """Distinct non-empty categories plus the "All" sentinel."""
    cats = {t.category for t in tasks if t.category}
    cats.add(ALL_CATEGORIES)
    return cats
