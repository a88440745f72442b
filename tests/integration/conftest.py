"""Shared fixtures for integration tests."""

from __future__ import annotations

from pathlib import Path

import pytest

APP_SOURCE = '''\
from typing import Generic, TypeVar

T = TypeVar("T")


class Repo(Generic[T]):
    def __init__(self) -> None:
        self.items: list[T] = []

    def add(self, item: T) -> None:
        self.items.append(item)

    def find(self, index: int) -> T | None:
        return self.items[index] if index < len(self.items) else None


class Service:
    def run(self, count: int) -> int:
        return count * 2
'''


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    """A profiled application whose code unit is not importable by name.

    Rows: Repo=0x02000001, Service=0x02000002; Repo.__init__=0x06000001,
    Repo.add=0x06000002, Repo.find=0x06000003, Service.run=0x06000004.
    """
    app = tmp_path / "app"
    app.mkdir()
    (app / "jl_e2e_app.py").write_text(APP_SOURCE)
    return app
