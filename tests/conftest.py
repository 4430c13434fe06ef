"""Shared fixtures for pkgplan tests."""

import json
import pathlib
from typing import Any, Callable

import pytest


@pytest.fixture
def write_documents(tmp_path: pathlib.Path) -> Callable[..., list[str]]:
    """Return a factory writing repository/initial/constraints JSON files.

    The factory returns the three paths as strings, in CLI argument order.
    """

    def _write(
        repository: Any,
        initial: Any = (),
        constraints: Any = (),
        directory: pathlib.Path | None = None,
    ) -> list[str]:
        target = directory or tmp_path
        target.mkdir(parents=True, exist_ok=True)
        paths = []
        for stem, data in (
            ("repository", repository),
            ("initial", list(initial)),
            ("constraints", list(constraints)),
        ):
            path = target / f"{stem}.json"
            path.write_text(json.dumps(data))
            paths.append(str(path))
        return paths

    return _write
