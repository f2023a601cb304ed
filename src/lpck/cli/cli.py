import logging
import os
from pathlib import Path

import click
from rich.console import Console

from lpck.cli.ensure import Ensure, fail
from lpck.cli.output import machine_output, user_output
from lpck.cli.rendering import format_run_summary
from lpck.core.config_store import LpckRc
from lpck.core.context import LpckContext, create_context
from lpck.core.errors import InstallError, LpckError, RestoreError
from lpck.core.orchestrator import RunOptions, run_local_install
from lpck.core.paths import HOME_ENV_VAR

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


def _run(ctx: LpckContext, options: RunOptions) -> None:
    """Run the pipeline and report its outcome; exits 1 if packing failed."""
    result = run_local_install(ctx, options)

    Console(stderr=True).print(format_run_summary(result, ctx.paths.packs_dir))

    if not result.succeeded:
        fail(f"{result.packaging_error}. Origin manifests were restored.")
    ctx.feedback.success("Done")


def _install_from_path(
    ctx: LpckContext, origin: Path, *, raw_install: bool, strict: bool
) -> None:
    _run(
        ctx,
        RunOptions(origin_dir=origin, target_dir=ctx.cwd, raw_install=raw_install, strict=strict),
    )


def _install_from_preset(
    ctx: LpckContext, name: str, *, no_prepack: bool, raw_install: bool, strict: bool
) -> None:
    ctx.feedback.info(f"Loading preset: {click.style(name, fg='yellow')}")
    rc = ctx.config_store.load()
    preset = Ensure.not_none(
        rc.find_preset(name), f"Preset {name} not found in {ctx.config_store.path()}"
    )

    prepack = None if no_prepack else preset.prepack_command
    _run(
        ctx,
        RunOptions(
            origin_dir=preset.origin_dir,
            target_dir=ctx.cwd,
            raw_install=raw_install,
            strict=strict,
            prepack=prepack,
        ),
    )


def _print_presets(ctx: LpckContext) -> None:
    rc = ctx.config_store.load()
    if not rc.presets:
        user_output(f"No presets found at: {ctx.config_store.path()}")
        return

    user_output(click.style(str(ctx.config_store.path()), fg="yellow") + ":")
    machine_output(rc.to_json().rstrip("\n"))


def _init_presets(ctx: LpckContext) -> None:
    Ensure.invariant(
        not ctx.config_store.exists(),
        f"Preset file already exists at: {ctx.config_store.path()}",
    )
    ctx.config_store.save(LpckRc.template())
    user_output(f"Preset file initialized at: {ctx.config_store.path()}")


def _report_restore_error(error: RestoreError) -> None:
    user_output(
        click.style("Error: ", fg="red", bold=True)
        + click.style("the origin workspace was left modified.", bold=True)
    )
    user_output(click.style(str(error), fg="red"))
    if error.__context__ is not None:
        user_output(f"The restore was triggered by: {error.__context__}")


@click.command("lpck", context_settings=CONTEXT_SETTINGS)
@click.argument(
    "origin",
    required=False,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option("-p", "--preset", "preset_name", metavar="NAME", help="The preset to use.")
@click.option(
    "--print-presets",
    "--printPresets",
    "print_presets",
    is_flag=True,
    help="Print the presets.",
)
@click.option("--init", "init_presets", is_flag=True, help="Initialize the preset file.")
@click.option(
    "--no-prepack",
    "--noPrepack",
    "no_prepack",
    is_flag=True,
    help="Do not execute the preset's prepack script.",
)
@click.option(
    "--raw-install",
    "--rawInstall",
    "raw_install",
    is_flag=True,
    help="Install every packed archive, not only the declared dependencies.",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Abort when packing fails instead of installing whatever archives exist.",
)
@click.option(
    "--home",
    type=click.Path(file_okay=False, path_type=Path),
    envvar=HOME_ENV_VAR,
    help="Directory for packed archives and presets (default: ~/.lpck).",
)
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings, errors and the summary.")
@click.version_option(package_name="lpck")
@click.pass_context
def cli(
    ctx: click.Context,
    origin: Path | None,
    preset_name: str | None,
    print_presets: bool,
    init_presets: bool,
    no_prepack: bool,
    raw_install: bool,
    strict: bool,
    home: Path | None,
    quiet: bool,
) -> None:
    """Pack a local npm workspace and install its packages into this project.

    ORIGIN is the root directory of the workspace to pack. Its members'
    references to each other are pointed at the packed archives while
    packing, then restored. The current directory is the project that
    receives the archives.
    """
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(home=home, quiet=quiet)
    lpck_ctx: LpckContext = ctx.obj

    try:
        if preset_name is not None:
            _install_from_preset(
                lpck_ctx, preset_name, no_prepack=no_prepack, raw_install=raw_install, strict=strict
            )
        elif print_presets:
            _print_presets(lpck_ctx)
        elif init_presets:
            _init_presets(lpck_ctx)
        elif origin is not None:
            _install_from_path(lpck_ctx, origin, raw_install=raw_install, strict=strict)
        else:
            click.echo(ctx.get_help())
    except RestoreError as e:
        _report_restore_error(e)
        raise SystemExit(1) from e
    except InstallError as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        user_output(f"Packed archives were kept in {lpck_ctx.paths.packs_dir}")
        raise SystemExit(1) from e
    except LpckError as e:
        fail(str(e))


def main() -> None:
    """CLI entry point used by the `lpck` console script."""
    if os.getenv("LPCK_DEBUG"):
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")
    cli()
