"""Test utilities for the config module."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from ._reader import get_repository, set_repository
from ._repository import FakeConfigRepository


@contextmanager
def override_config(
    *,
    env: dict[str, str] | None = None,
    file: dict[str, Any] | None = None,
) -> Iterator[FakeConfigRepository]:
    """Temporarily replace the config source with a ``FakeConfigRepository``.

    Usage::

        with override_config(env={"EXCEL_IMPORTER_TRUE_LABEL": "Yes"}) as repo:
            assert ImporterSettings.load().true_label == "Yes"
            repo.set_file("excel_importer_false_label", "No")  # mutate inside context
    """
    previous = get_repository()
    fake = FakeConfigRepository(env=env, file=file)
    set_repository(fake)
    try:
        yield fake
    finally:
        set_repository(previous)
