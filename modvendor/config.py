"""Run configuration.

Collects the command line inputs and the environment-derived module cache
location into one immutable :class:`VendorConfig`.
"""

from collections.abc import Mapping
from dataclasses import dataclass
import pathlib

from modvendor.errors import PreconditionError
from modvendor.modcache import resolve_cache_root


@dataclass(frozen=True, slots=True)
class VendorConfig:
    """Configuration of one vendoring run.

    :ivar project_root: Go project root (contains ``go.mod``).
    :ivar cache_root: Go module cache root.
    :ivar patterns: Copy glob patterns, relative to each module directory.
    :ivar include_packages: Extra package import paths treated as imported.
    """

    project_root: pathlib.Path
    cache_root: pathlib.Path
    patterns: tuple[str, ...]
    include_packages: tuple[str, ...] = ()

    @property
    def go_mod_path(self) -> pathlib.Path:
        return self.project_root / "go.mod"

    @property
    def vendor_root(self) -> pathlib.Path:
        return self.project_root / "vendor"

    @property
    def manifest_path(self) -> pathlib.Path:
        return self.vendor_root / "modules.txt"


def split_flag_list(value: str | None) -> tuple[str, ...]:
    """Split a space separated flag value.

    :param value: Raw flag value (may be ``None``).
    :returns: Non-empty items, in order.
    """

    if value is None:
        return ()
    return tuple(value.split())


def resolve_vendor_config(
    *,
    copy: str | None,
    include: str | None = None,
    project_root: pathlib.Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> VendorConfig:
    """Resolve user-supplied arguments into a :class:`VendorConfig`.

    :param copy: Value of ``-copy``.
    :param include: Value of ``-include``.
    :param project_root: Project root (defaults to the current directory).
    :param environ: Environment mapping used to locate the module cache.
    :returns: Resolved config.
    :raises PreconditionError: If no copy pattern was given.
    """

    patterns: tuple[str, ...] = split_flag_list(copy)
    if len(patterns) == 0:
        raise PreconditionError("-copy argument is empty.")

    root: pathlib.Path = project_root if project_root is not None else pathlib.Path.cwd()

    return VendorConfig(
        project_root=root.absolute(),
        cache_root=resolve_cache_root(environ),
        patterns=patterns,
        include_packages=split_flag_list(include),
    )
