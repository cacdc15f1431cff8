"""Go module cache layout helpers.

The module cache stores each module under ``<root>/<encoded-path>@<version>``
where the import path is case-folded: every uppercase letter is written as
``!`` followed by its lowercase form, so the layout is safe on
case-insensitive filesystems.
"""

import os
import pathlib
from collections.abc import Mapping

_ESCAPE: str = "!"


def encode_import_path(import_path: str) -> str:
    """Case-fold an import path for use as a module cache directory name.

    :param import_path: Module import path (e.g. ``github.com/Azure/go-autorest``).
    :returns: Encoded path (e.g. ``github.com/!azure/go-autorest``).
    """

    out: list[str] = []
    for ch in import_path:
        if ch.isupper() is True:
            out.append(_ESCAPE + ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def module_cache_dir(cache_root: pathlib.Path, import_path: str, version: str) -> pathlib.Path:
    """Compute where a module version lives inside the module cache.

    This does not touch the filesystem; callers check existence.

    :param cache_root: Module cache root (``$GOPATH/pkg/mod``).
    :param import_path: Module import path.
    :param version: Module version (not escaped).
    :returns: Module directory.
    """

    encoded: str = encode_import_path(import_path)
    parts: list[str] = [p for p in f"{encoded}@{version}".split("/") if p != ""]
    return cache_root.joinpath(*parts)


def resolve_cache_root(environ: Mapping[str, str] | None = None) -> pathlib.Path:
    """Locate the module cache root from the environment.

    Order: ``GOMODCACHE``, then the first ``GOPATH`` entry plus ``pkg/mod``,
    then ``$HOME/go/pkg/mod``.

    :param environ: Environment mapping (defaults to ``os.environ``).
    :returns: Absolute module cache root.
    """

    if environ is None:
        environ = os.environ

    modcache: str = environ.get("GOMODCACHE", "")
    if modcache != "":
        return pathlib.Path(modcache).expanduser().absolute()

    gopath: str = environ.get("GOPATH", "")
    entries: list[str] = [e for e in gopath.split(os.pathsep) if e != ""]
    if len(entries) > 0:
        return (pathlib.Path(entries[0]).expanduser() / "pkg" / "mod").absolute()

    home: str = environ.get("HOME", "")
    home_path: pathlib.Path = pathlib.Path(home) if home != "" else pathlib.Path.home()
    return (home_path / "go" / "pkg" / "mod").absolute()
