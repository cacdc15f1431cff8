import pathlib

import pytest

from modvendor.modcache import module_cache_dir


@pytest.fixture()
def cache_root(tmp_path: pathlib.Path) -> pathlib.Path:
    root = tmp_path / "gopath" / "pkg" / "mod"
    root.mkdir(parents=True)
    return root


@pytest.fixture()
def make_module(cache_root: pathlib.Path):
    """
    Creates a module directory in the fake module cache, with the given files
    (relative path -> bytes).
    """

    def _make(import_path: str, version: str, files: dict[str, bytes] | None = None) -> pathlib.Path:
        mod_dir = module_cache_dir(cache_root, import_path, version)
        mod_dir.mkdir(parents=True, exist_ok=True)
        for rel, data in (files or {}).items():
            p = mod_dir / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_bytes(data)
        return mod_dir

    return _make


@pytest.fixture()
def project(tmp_path: pathlib.Path):
    """
    Provides a fake Go project that has been through `go mod vendor`.
    Call it with the modules.txt content.
    """

    root = tmp_path / "project"

    def _make(modules_txt: str) -> pathlib.Path:
        (root / "vendor").mkdir(parents=True, exist_ok=True)
        (root / "go.mod").write_text("module example.com/app\n", encoding="utf-8")
        (root / "vendor" / "modules.txt").write_text(modules_txt, encoding="utf-8")
        return root

    return _make
