"""Vendor tree planning and copying.

This module ties the pipeline together:

- It checks that the project has been vendored with ``go mod vendor``.
- It parses ``vendor/modules.txt`` into module records.
- For each module it collects pattern matches from the module cache, keeps
  the ones under an imported package, and maps them into ``vendor/``.
- It copies the selected files, overwriting earlier copies.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
import logging
import os
import pathlib
import shutil
import stat
import time

from modvendor.config import VendorConfig
from modvendor.errors import ConsistencyError, CopyError, PreconditionError
from modvendor.manifest import ModuleRecord, read_manifest
from modvendor.selector import collect_candidates, select_in_scope


@dataclass(frozen=True, slots=True)
class VendorFile:
    """One file to copy into the vendor tree.

    :ivar source: Absolute path inside the module cache.
    :ivar destination: Path inside the vendor tree.
    :ivar local_path: ``<import-path>/<relpath>`` used in progress output.
    """

    source: pathlib.Path
    destination: pathlib.Path
    local_path: str


@dataclass(frozen=True, slots=True)
class VendorReport:
    """Summary of a vendoring run.

    :ivar modules: Number of modules read from the manifest.
    :ivar files_copied: Number of files copied.
    :ivar bytes_copied: Total bytes copied.
    """

    modules: int
    files_copied: int
    bytes_copied: int


def vendor_destination(
    record: ModuleRecord,
    candidate: pathlib.Path,
    vendor_root: pathlib.Path,
) -> VendorFile:
    """Map a module cache file to its place under ``vendor/``.

    :param record: Module the candidate was selected for.
    :param candidate: Selected file inside ``record.dir``.
    :param vendor_root: Project vendor directory.
    :returns: The planned copy.
    :raises ConsistencyError: If ``candidate`` is not inside ``record.dir``.
    """

    mod_dir: pathlib.Path = pathlib.Path(os.path.normpath(record.dir))
    normalized: pathlib.Path = pathlib.Path(os.path.normpath(candidate))
    if normalized.is_relative_to(mod_dir) is False:
        raise ConsistencyError(
            f"Internal error: vendor file {candidate} does not belong to module {record.import_path} ({record.dir})."
        )

    rel: str = normalized.relative_to(mod_dir).as_posix()
    if rel == ".":
        rel = ""
    local_path: str = f"{record.import_path}/{rel}" if rel != "" else record.import_path
    parts: list[str] = [p for p in local_path.split("/") if p != ""]
    return VendorFile(
        source=candidate,
        destination=vendor_root.joinpath(*parts),
        local_path=local_path,
    )


def plan_module(
    record: ModuleRecord,
    *,
    patterns: Sequence[str],
    include_packages: Iterable[str],
    vendor_root: pathlib.Path,
) -> tuple[VendorFile, ...]:
    """Plan the copies for one module.

    :param record: Module record.
    :param patterns: Copy patterns.
    :param include_packages: Extra package import paths.
    :param vendor_root: Project vendor directory.
    :returns: Planned copies (possibly empty).
    """

    candidates: tuple[pathlib.Path, ...] = collect_candidates(patterns, record)
    selected: tuple[pathlib.Path, ...] = select_in_scope(record, candidates, include_packages)
    return tuple(vendor_destination(record, p, vendor_root) for p in selected)


def copy_vendor_file(src: pathlib.Path, dst: pathlib.Path) -> int:
    """Copy one regular file, creating parent directories.

    Only the bytes are copied; module cache files are read-only and their mode
    must not carry over, or a second run could not overwrite them.

    :param src: Source file.
    :param dst: Destination file (overwritten if present).
    :returns: Number of bytes copied.
    :raises CopyError: If ``src`` is not a regular file or the copy fails.
    """

    try:
        st: os.stat_result = src.lstat()
    except OSError as e:
        raise CopyError(f"{e} - unable to copy file {src}") from e
    if stat.S_ISREG(st.st_mode) is False:
        raise CopyError(f"{src} is not a regular file - unable to copy file {src}")

    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)
    except OSError as e:
        raise CopyError(f"{e} - unable to copy file {src}") from e
    return st.st_size


def _check_preconditions(config: VendorConfig) -> None:
    """Ensure the project has been vendored.

    :param config: Run configuration.
    :raises PreconditionError: If ``go.mod`` or ``vendor/modules.txt`` is missing.
    """

    for path in (config.go_mod_path, config.manifest_path):
        if path.exists() is False:
            raise PreconditionError(f"{path} not found. Run `go mod vendor` and try again.")


def vendor_modules(config: VendorConfig, logger: logging.Logger | None = None) -> VendorReport:
    """Copy the selected module cache files into the project vendor tree.

    Every module is planned before the first file is copied, so manifest,
    resolution and pattern errors abort the run without touching ``vendor/``.

    :param config: Run configuration.
    :param logger: Optional logger for progress output.
    :returns: Run summary.
    :raises VendorError: On any failure; files already copied are left in place.
    """

    if logger is None:
        logger = logging.getLogger("modvendor")

    _check_preconditions(config)

    t0: float = time.perf_counter()
    logger.info(f"modvendor: manifest={config.manifest_path}")
    logger.info(f"modvendor: cache_root={config.cache_root}")
    if logger.isEnabledFor(logging.DEBUG) is True:
        logger.debug(f"modvendor: patterns={list(config.patterns)}")
        logger.debug(f"modvendor: include={list(config.include_packages)}")

    records: tuple[ModuleRecord, ...] = read_manifest(
        config.manifest_path,
        cache_root=config.cache_root,
        project_root=config.project_root,
        logger=logger,
    )

    plan: list[VendorFile] = []
    for record in records:
        files: tuple[VendorFile, ...] = plan_module(
            record,
            patterns=config.patterns,
            include_packages=config.include_packages,
            vendor_root=config.vendor_root,
        )
        plan.extend(files)

    files_copied: int = 0
    bytes_copied: int = 0
    for vf in plan:
        logger.debug(f"vendoring {vf.local_path}")
        bytes_copied += copy_vendor_file(vf.source, vf.destination)
        files_copied += 1

    t1: float = time.perf_counter()
    logger.info(
        f"modvendor: copied {files_copied} files ({bytes_copied} bytes) "
        f"from {len(records)} modules in {t1 - t0:.2f}s"
    )
    return VendorReport(modules=len(records), files_copied=files_copied, bytes_copied=bytes_copied)
