"""Candidate collection and package scope filtering.

Collection globs every copy pattern under a module directory. Filtering keeps
only the candidates that live under a package the build actually imports, as
listed in ``modules.txt`` (plus packages forced in with ``-include``).
"""

from collections.abc import Iterable, Sequence
import pathlib

from modvendor.errors import PatternError
from modvendor.manifest import ModuleRecord


def validate_pattern(pattern: str) -> None:
    """Reject glob patterns that cannot be evaluated under a module directory.

    :param pattern: Copy pattern (e.g. ``**/*.proto``).
    :raises PatternError: If the pattern is malformed.
    """

    if pattern == "":
        raise PatternError("glob match failure: empty pattern")
    if pattern.startswith("/") is True or pathlib.PurePath(pattern).is_absolute() is True:
        raise PatternError(f"glob match failure: pattern must be relative: {pattern!r}")

    for segment in pattern.split("/"):
        if segment == "..":
            raise PatternError(f"glob match failure: pattern must stay inside the module: {pattern!r}")
        if "**" in segment and segment != "**":
            raise PatternError(
                f"glob match failure: '**' can only be an entire path component: {pattern!r}"
            )
        open_at: int = segment.find("[")
        if open_at >= 0 and segment.find("]", open_at + 2) < 0:
            raise PatternError(f"glob match failure: unterminated character class: {pattern!r}")


def collect_candidates(patterns: Sequence[str], record: ModuleRecord) -> tuple[pathlib.Path, ...]:
    """Collect files under a module directory matching any copy pattern.

    :param patterns: Copy patterns relative to the module directory.
    :param record: Module record.
    :returns: Sorted unique matched paths (possibly empty).
    :raises PatternError: If a pattern is malformed.
    """

    matches: set[pathlib.Path] = set()
    for pattern in patterns:
        validate_pattern(pattern)
        try:
            for p in record.dir.glob(pattern):
                matches.add(p)
        except ValueError as e:
            raise PatternError(f"glob match failure: {pattern!r}: {e}") from e
    return tuple(sorted(matches))


def _import_path_suffix(base_path: str, pkg_path: str) -> str:
    # Packages outside the module yield "" and therefore scope the whole module.
    if pkg_path.startswith(base_path) is False:
        return ""
    return pkg_path[len(base_path) :]


def scope_dirs(record: ModuleRecord, extra_packages: Iterable[str] = ()) -> tuple[pathlib.Path, ...]:
    """Compute the directories whose files are in scope for a module.

    :param record: Module record.
    :param extra_packages: Additional package import paths (``-include``).
    :returns: One directory per package, in package order.
    """

    packages: list[str] = list(record.packages)
    for pkg in extra_packages:
        if pkg.startswith(record.import_path) is True:
            packages.append(pkg)

    dirs: list[pathlib.Path] = []
    for pkg in packages:
        suffix: str = _import_path_suffix(record.import_path, pkg)
        parts: list[str] = [p for p in suffix.split("/") if p != ""]
        dirs.append(record.dir.joinpath(*parts))
    return tuple(dirs)


def select_in_scope(
    record: ModuleRecord,
    candidates: Sequence[pathlib.Path],
    extra_packages: Iterable[str] = (),
) -> tuple[pathlib.Path, ...]:
    """Keep the candidates that live under an imported package of the module.

    The test is a plain string prefix on the path, so a package directory
    ``foo/bar`` also scopes ``foo/barbaz``.

    :param record: Module record.
    :param candidates: Candidates from :func:`collect_candidates`.
    :param extra_packages: Additional package import paths (``-include``).
    :returns: Selected candidates, in candidate order.
    """

    if len(candidates) == 0:
        return ()

    prefixes: list[str] = [str(d) for d in scope_dirs(record, extra_packages)]
    selected: list[pathlib.Path] = []
    for candidate in candidates:
        path_str: str = str(candidate)
        if any(path_str.startswith(prefix) for prefix in prefixes):
            selected.append(candidate)
    return tuple(selected)
