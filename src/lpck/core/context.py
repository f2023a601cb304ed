"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

import click

from lpck.cli.output import user_output
from lpck.core.config_store import ConfigStore, RealConfigStore
from lpck.core.manifest import ManifestStore, RealManifestStore
from lpck.core.npm import PackageManager, RealNpm
from lpck.core.paths import LpckPaths
from lpck.core.user_feedback import InteractiveFeedback, SuppressedFeedback, UserFeedback


@dataclass(frozen=True)
class LpckContext:
    """Immutable context holding all dependencies for lpck operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    manifest_store: ManifestStore
    package_manager: PackageManager
    config_store: ConfigStore
    feedback: UserFeedback
    paths: LpckPaths
    cwd: Path  # Consumer project: where lpck was invoked

    @staticmethod
    def for_test(
        manifest_store: ManifestStore | None = None,
        package_manager: PackageManager | None = None,
        config_store: ConfigStore | None = None,
        feedback: UserFeedback | None = None,
        paths: LpckPaths | None = None,
        cwd: Path | None = None,
    ) -> "LpckContext":
        """Create test context with optional pre-configured dependencies.

        Unspecified dependencies get test defaults: the real manifest store
        (tests build workspaces under tmp_path), a FakePackageManager, an
        empty InMemoryConfigStore and FakeUserFeedback.

        Example:
            >>> npm = FakePackageManager(pack_exit_code=1)
            >>> ctx = LpckContext.for_test(
            ...     package_manager=npm,
            ...     paths=LpckPaths(home=tmp_path / "lpck-home"),
            ...     cwd=tmp_path / "app",
            ... )
        """
        from tests.fakes.npm import FakePackageManager
        from tests.fakes.user_feedback import FakeUserFeedback
        from tests.test_utils.paths import sentinel_path

        from lpck.core.config_store import InMemoryConfigStore

        if manifest_store is None:
            manifest_store = RealManifestStore()

        if package_manager is None:
            package_manager = FakePackageManager()

        if config_store is None:
            config_store = InMemoryConfigStore()

        if feedback is None:
            feedback = FakeUserFeedback()

        if paths is None:
            paths = LpckPaths(home=sentinel_path() / "lpck-home")

        return LpckContext(
            manifest_store=manifest_store,
            package_manager=package_manager,
            config_store=config_store,
            feedback=feedback,
            paths=paths,
            cwd=cwd or sentinel_path(),
        )


def safe_cwd() -> tuple[Path | None, str | None]:
    """Get current working directory, detecting if it no longer exists.

    Returns:
        tuple[Path | None, str | None]: (path, error_message)
    """
    try:
        return (Path.cwd(), None)
    except (FileNotFoundError, OSError):
        return (None, "Current working directory no longer exists")


def create_context(*, home: Path | None, quiet: bool = False) -> LpckContext:
    """Create production context with real implementations.

    Args:
        home: Base directory for archives and presets (None = ~/.lpck)
        quiet: Suppress progress output, keeping warnings and errors
    """
    cwd, error_msg = safe_cwd()
    if cwd is None:
        assert error_msg is not None
        user_output(click.style("Error: ", fg="red") + error_msg)
        raise SystemExit(1)

    paths = LpckPaths.from_option(home)

    feedback: UserFeedback
    if quiet:
        feedback = SuppressedFeedback()
    else:
        feedback = InteractiveFeedback()

    return LpckContext(
        manifest_store=RealManifestStore(),
        package_manager=RealNpm(),
        config_store=RealConfigStore(paths.rc_path),
        feedback=feedback,
        paths=paths,
        cwd=cwd,
    )
