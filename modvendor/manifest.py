"""``vendor/modules.txt`` parsing.

The manifest written by ``go mod vendor`` lists every vendored module followed
by the packages of that module the build imports::

    # github.com/pkg/errors v0.9.1
    ## explicit
    github.com/pkg/errors
    # example.com/old v1.0.0 => example.com/new v1.1.0
    example.com/old/sub

Parsing is a fold over the lines: each step takes the previous
:class:`_ParseState` and returns a new one, so the module that a package line
belongs to is always explicit in the state.
"""

from dataclasses import dataclass, replace
import logging
import pathlib

from modvendor.errors import ManifestError, ResolutionError
from modvendor.modcache import module_cache_dir

MODULE_SENTINEL: str = "#"
ANNOTATION_PREFIX: str = "##"
REPLACE_MARKER: str = "=>"


@dataclass(frozen=True, slots=True)
class ModuleRecord:
    """One module entry of the manifest.

    :ivar import_path: Module import path as it appears in the build.
    :ivar version: Resolved module version.
    :ivar source_path: Replacement import path (``replace`` entries only).
    :ivar source_version: Replacement version (``replace`` entries only).
    :ivar dir: Absolute module cache directory the files are read from.
    :ivar packages: Package import paths of this module used by the build.
    """

    import_path: str
    version: str
    source_path: str | None
    source_version: str | None
    dir: pathlib.Path
    packages: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class _ParseState:
    """Accumulator carried between line steps.

    :ivar records: Completed records, in manifest order.
    :ivar current: Record receiving package lines, if any.
    :ivar skipping: ``True`` while inside a skipped redirection entry.
    """

    records: tuple[ModuleRecord, ...] = ()
    current: ModuleRecord | None = None
    skipping: bool = False

    def flush(self) -> tuple[ModuleRecord, ...]:
        if self.current is None:
            return self.records
        return self.records + (self.current,)


def parse_manifest(
    text: str,
    *,
    cache_root: pathlib.Path,
    project_root: pathlib.Path | None = None,
    logger: logging.Logger | None = None,
) -> tuple[ModuleRecord, ...]:
    """Parse manifest text into module records.

    :param text: Full ``modules.txt`` content.
    :param cache_root: Module cache root used to resolve module directories.
    :param project_root: Project root for local directory replacements (defaults to the cwd).
    :param logger: Optional logger for debug output.
    :returns: Records in manifest order.
    :raises ManifestError: If a line cannot be interpreted.
    :raises ResolutionError: If a module directory is missing from the cache.
    """

    if logger is None:
        logger = logging.getLogger("modvendor")

    state: _ParseState = _ParseState()
    for lineno, line in enumerate(text.splitlines(), start=1):
        state = _step(
            state, line, lineno=lineno, cache_root=cache_root, project_root=project_root, logger=logger
        )
    return state.flush()


def read_manifest(
    path: pathlib.Path,
    *,
    cache_root: pathlib.Path,
    project_root: pathlib.Path | None = None,
    logger: logging.Logger | None = None,
) -> tuple[ModuleRecord, ...]:
    """Read and parse a ``modules.txt`` file.

    :param path: Manifest path.
    :param cache_root: Module cache root.
    :param project_root: Project root for local directory replacements.
    :param logger: Optional logger.
    :returns: Records in manifest order.
    """

    try:
        text: str = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Unable to read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ManifestError(f"{path} is not valid UTF-8: {e}") from e
    return parse_manifest(text, cache_root=cache_root, project_root=project_root, logger=logger)


def _step(
    state: _ParseState,
    line: str,
    *,
    lineno: int,
    cache_root: pathlib.Path,
    project_root: pathlib.Path | None,
    logger: logging.Logger,
) -> _ParseState:
    """Apply one manifest line to the parse state.

    :param state: State before the line.
    :param line: Raw line (no trailing newline).
    :param lineno: 1-based line number for error messages.
    :param cache_root: Module cache root.
    :param project_root: Project root for local directory replacements.
    :param logger: Logger for debug output.
    :returns: State after the line.
    """

    if line.strip() == "" or line.startswith(ANNOTATION_PREFIX) is True:
        return state

    if line.startswith(MODULE_SENTINEL) is True:
        record: ModuleRecord | None = _parse_module_line(
            line, lineno=lineno, cache_root=cache_root, project_root=project_root, logger=logger
        )
        if record is None:
            return _ParseState(records=state.flush(), current=None, skipping=True)
        return _ParseState(records=state.flush(), current=record, skipping=False)

    if state.skipping is True:
        logger.debug(f"modvendor: line {lineno}: ignoring package of skipped entry: {line}")
        return state

    if state.current is None:
        raise ManifestError(
            f"modules.txt line {lineno}: package {line!r} appears before any module line (no current module)."
        )

    current: ModuleRecord = replace(state.current, packages=state.current.packages + (line,))
    return replace(state, current=current)


def _is_local_replacement(target: str) -> bool:
    """Check if a replace target is a filesystem path rather than a module path.

    :param target: Replacement token from the manifest.
    :returns: ``True`` for ``./``, ``../`` and absolute paths.
    """

    return target.startswith(("./", "../", "/")) or target in {".", ".."}


def _parse_module_line(
    line: str,
    *,
    lineno: int,
    cache_root: pathlib.Path,
    project_root: pathlib.Path | None,
    logger: logging.Logger,
) -> ModuleRecord | None:
    """Parse a ``# <path> <version> [=> <path> <version>]`` line.

    :param line: Raw module line.
    :param lineno: 1-based line number.
    :param cache_root: Module cache root.
    :param project_root: Project root for local directory replacements.
    :param logger: Logger for debug output.
    :returns: The record, or ``None`` for a redirection-only entry.
    :raises ManifestError: If the line is malformed.
    :raises ResolutionError: If the module directory does not exist.
    """

    tokens: list[str] = line[len(MODULE_SENTINEL) :].split()
    if len(tokens) < 2:
        raise ManifestError(f"modules.txt line {lineno}: malformed module line: {line!r}")

    import_path: str = tokens[0]
    version: str = tokens[1]

    # Old Go releases wrote "# path => target" entries for replaced modules
    # that are not otherwise required; they carry nothing to vendor.
    if version == REPLACE_MARKER:
        logger.debug(f"modvendor: line {lineno}: skipping redirection entry for {import_path}")
        return None

    source_path: str | None = None
    source_version: str | None = None
    if len(tokens) > 2 and tokens[2] == REPLACE_MARKER:
        if len(tokens) == 4 and _is_local_replacement(tokens[3]) is True:
            source_path = tokens[3]
            base: pathlib.Path = project_root if project_root is not None else pathlib.Path.cwd()
            mod_dir: pathlib.Path = (base / source_path).absolute()
        elif len(tokens) >= 5:
            source_path = tokens[3]
            source_version = tokens[4]
            mod_dir = module_cache_dir(cache_root, source_path, source_version)
        else:
            raise ManifestError(f"modules.txt line {lineno}: incomplete replace target: {line!r}")
    else:
        mod_dir = module_cache_dir(cache_root, import_path, version)

    if mod_dir.is_dir() is False:
        raise ResolutionError(f"{mod_dir} module path does not exist. Check $GOPATH/pkg/mod.")

    return ModuleRecord(
        import_path=import_path,
        version=version,
        source_path=source_path,
        source_version=source_version,
        dir=mod_dir,
    )
