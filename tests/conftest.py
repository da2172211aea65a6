"""Shared fixtures: throwaway importable packages under tmp_path."""

import sys
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest


@pytest.fixture
def make_package(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Callable[[str, dict[str, str]], str]]:
    """Write an importable top-level package and return its name.

    Names are suffixed with the test's tmp dir name so every test imports
    fresh modules.
    """
    created: list[str] = []
    root = tmp_path / "pkgs"

    def make(name: str, modules: dict[str, str]) -> str:
        package = f"{name}_{tmp_path.name}"
        pkg_dir = root / package
        pkg_dir.mkdir(parents=True, exist_ok=True)
        (pkg_dir / "__init__.py").write_text("")
        for module, source in modules.items():
            (pkg_dir / f"{module}.py").write_text(textwrap.dedent(source))
        created.append(package)
        monkeypatch.syspath_prepend(str(root))
        return package

    yield make

    for package in created:
        for module in [m for m in sys.modules if m == package or m.startswith(f"{package}.")]:
            del sys.modules[module]
