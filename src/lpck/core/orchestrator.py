"""The pack-and-install pipeline for one run.

Sequence (each state is entered at most once, never revisited):

    IDLE → ORIGIN_LOADED → SUBSTITUTED → PACKED | PACK_FAILED → RESTORED
         → TARGET_LOADED → INSTALLED → CLEANED_UP → DONE

Origin manifests are only mutated between SUBSTITUTED and RESTORED, and the
restore runs whether or not packing succeeded. A packing failure is
best-effort by default: the run still installs whatever archives exist and
reports the failure on the result. With `strict`, it aborts after restoring.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import click

from lpck.core.context import LpckContext
from lpck.core.errors import PackagingError, ResolutionError
from lpck.core.installer import clean_up_archives, install_archives, select_packages
from lpck.core.packager import pack_all, run_prepack
from lpck.core.substitution import local_archive_substitution
from lpck.core.workspace import (
    AvailablePackage,
    WorkspaceRegistry,
    declared_dependencies,
    resolve_workspace,
)

logger = logging.getLogger(__name__)


class RunState(Enum):
    IDLE = "idle"
    ORIGIN_LOADED = "origin_loaded"
    SUBSTITUTED = "substituted"
    PACKED = "packed"
    PACK_FAILED = "pack_failed"
    RESTORED = "restored"
    TARGET_LOADED = "target_loaded"
    INSTALLED = "installed"
    CLEANED_UP = "cleaned_up"
    DONE = "done"


@dataclass(frozen=True)
class RunOptions:
    """What to pack, where to install it, and how.

    Attributes:
        origin_dir: Root of the workspace whose members are packed
        target_dir: Consumer project receiving the archives
        raw_install: Install every archive in the archive directory
        strict: Abort the run when packing fails
        prepack: Command line to run in origin_dir before loading it
    """

    origin_dir: Path
    target_dir: Path
    raw_install: bool = False
    strict: bool = False
    prepack: str | None = None


@dataclass(frozen=True)
class RunResult:
    """Outcome of a completed run."""

    states: tuple[RunState, ...]
    available: tuple[AvailablePackage, ...]
    substituted: tuple[str, ...]
    selected: tuple[AvailablePackage, ...]
    installed: tuple[Path, ...]
    packaging_error: PackagingError | None

    @property
    def succeeded(self) -> bool:
        return self.packaging_error is None


def load_origin(ctx: LpckContext, origin_dir: Path) -> WorkspaceRegistry:
    """Load the origin workspace members (the root itself is never packed).

    Raises:
        ResolutionError: If the root manifest is unusable or declares no members
        ManifestLoadError: If a member manifest is malformed
    """
    ctx.feedback.info("Loading origin package...")
    members = resolve_workspace(origin_dir, ctx.manifest_store, include_root=False)
    if not members:
        raise ResolutionError(f"{origin_dir} does not declare any workspace packages")
    registry = WorkspaceRegistry.load(members, ctx.manifest_store)
    ctx.feedback.info(f"Workspaces loaded: {len(registry)}")
    return registry


def load_target(ctx: LpckContext, target_dir: Path) -> WorkspaceRegistry:
    """Load the consumer project, its own workspace members included."""
    ctx.feedback.info("Loading target package...")
    members = resolve_workspace(target_dir, ctx.manifest_store, include_root=True)
    registry = WorkspaceRegistry.load(members, ctx.manifest_store)
    ctx.feedback.info(f"Target package loaded: {click.style(registry.names[-1], bold=True)}")
    return registry


def run_local_install(ctx: LpckContext, options: RunOptions) -> RunResult:
    """Pack the origin workspace and install its archives into the target.

    Args:
        ctx: Context providing manifest store, package manager and paths
        options: Origin, target and mode for this run

    Returns:
        RunResult; check `packaging_error` even though the run completed

    Raises:
        PrepackError: Prepack command failed (nothing was mutated)
        ResolutionError: Origin directory missing, or origin or target root unusable
        ManifestLoadError: A manifest is malformed
        PackagingError: Packing failed and options.strict is set (restored)
        RestoreError: Origin manifests could not be reverted
        InstallError: The install command failed (archives are kept)
    """
    archive_dir = ctx.paths.packs_dir
    states: list[RunState] = [RunState.IDLE]

    if not options.origin_dir.is_dir():
        raise ResolutionError(f"Origin directory does not exist: {options.origin_dir}")

    if options.prepack:
        run_prepack(ctx.package_manager, options.prepack, options.origin_dir, ctx.feedback)

    origin = load_origin(ctx, options.origin_dir)
    available = origin.available_packages()
    states.append(RunState.ORIGIN_LOADED)

    packaging_error: PackagingError | None = None
    ctx.feedback.info("Updating workspaces dependencies to locally packed packages...")
    with local_archive_substitution(origin, ctx.manifest_store, archive_dir) as token:
        states.append(RunState.SUBSTITUTED)
        try:
            pack_all(ctx.package_manager, options.origin_dir.resolve(), archive_dir, ctx.feedback)
        except PackagingError as e:
            if options.strict:
                ctx.feedback.error(f"{e}; restoring original dependencies")
                raise
            ctx.feedback.error(str(e))
            packaging_error = e
            states.append(RunState.PACK_FAILED)
        else:
            states.append(RunState.PACKED)
        ctx.feedback.info("Restoring workspaces dependencies to original dependencies...")
    states.append(RunState.RESTORED)
    ctx.feedback.info("Workspaces dependencies restored to original dependencies")
    logger.debug("Linked %s; restored %s", token.linked, token.restored)

    target = load_target(ctx, options.target_dir)
    states.append(RunState.TARGET_LOADED)

    declared = declared_dependencies(target)
    selected = select_packages(declared, available)
    if declared is None:
        ctx.feedback.info("No dependencies found in target package")
    elif not selected:
        ctx.feedback.info("No dependencies to install found in target package")

    installed = install_archives(
        ctx.package_manager,
        options.target_dir.resolve(),
        archive_dir,
        selected,
        raw_mode=options.raw_install,
        feedback=ctx.feedback,
    )
    if installed:
        ctx.feedback.info("Dependencies installed")
    states.append(RunState.INSTALLED)

    ctx.feedback.info("Cleaning up packs...")
    clean_up_archives(archive_dir)
    states.append(RunState.CLEANED_UP)

    states.append(RunState.DONE)
    return RunResult(
        states=tuple(states),
        available=tuple(available),
        substituted=tuple(token.linked),
        selected=tuple(selected),
        installed=tuple(installed),
        packaging_error=packaging_error,
    )
