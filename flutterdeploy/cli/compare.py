"""CLI commands comparing local versions with the published store versions."""

import click
from click.core import ParameterSource

from flutterdeploy.cli.utils.logging import logger
from flutterdeploy.config import ProjectConfig
from flutterdeploy.versioning import (
    STORE_SOURCES,
    BumpKind,
    ReconciliationEngine,
    RunMode,
    StoreVersionCache,
    VersioningError,
    VersionSource,
    next_version,
)

from .debug import add_debug_option
from .report import format_report
from .utils.args import env_flag, project_dir_option, resolve_store_ids, store_id_options
from .version import apply_version


def _stores(project_dir, package_id, bundle_id, which):
    package_id, bundle_id = resolve_store_ids(project_dir, package_id, bundle_id)
    ids = {VersionSource.GOOGLE_PLAY: package_id, VersionSource.APP_STORE: bundle_id}
    return {store: ids[store] for store in which}


def _echo_report(report):
    for line in format_report(report):
        click.echo(line)


def _compare(ctx, project_dir, package_id, bundle_id, which):
    engine = ReconciliationEngine(
        project_dir,
        stores=_stores(project_dir, package_id, bundle_id, which),
        cache=StoreVersionCache(),
    )
    try:
        report = engine.run(RunMode.REPORT)
    except VersioningError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)
    _echo_report(report)


@add_debug_option
@click.command(name="compare")
@project_dir_option
@store_id_options
@click.pass_context
def compare(ctx, project_dir, package_id, bundle_id):
    """Compare the local version with the App Store."""
    _compare(ctx, project_dir, package_id, bundle_id, [VersionSource.APP_STORE])


@add_debug_option
@click.command(name="compare-android")
@project_dir_option
@store_id_options
@click.pass_context
def compare_android(ctx, project_dir, package_id, bundle_id):
    """Compare the local version with Google Play."""
    _compare(ctx, project_dir, package_id, bundle_id, [VersionSource.GOOGLE_PLAY])


@add_debug_option
@click.command(name="compare-all")
@project_dir_option
@store_id_options
@click.pass_context
def compare_all(ctx, project_dir, package_id, bundle_id):
    """Compare the local version with Google Play and the App Store."""
    _compare(ctx, project_dir, package_id, bundle_id, STORE_SOURCES)


def _confirm(report) -> bool:
    return click.confirm(
        f"Update {report.canonical} to {report.recommended} on every platform?",
        default=True,
    )


@add_debug_option
@click.command(name="smart-bump")
@project_dir_option
@store_id_options
@click.option(
    "--interactive/--automated",
    default=False,
    help="Ask before writing the recommended version. "
    "Defaults to VERSION_STRATEGY in project.config (manual asks).",
)
@click.option("--yes", "-y", is_flag=True, default=False, help="Never prompt.")
@click.pass_context
def smart_bump(ctx, project_dir, package_id, bundle_id, interactive, yes):
    """
    Move the local version past the stores when needed.

    The recommended version keeps the highest published version name and
    uses the next build number. Without any store data the local build
    number is bumped instead.
    """
    if ctx.get_parameter_source("interactive") is ParameterSource.DEFAULT:
        strategy = ProjectConfig.load(project_dir).version_strategy
        logger.debug(f"VERSION_STRATEGY is {strategy}")
        interactive = strategy == "manual"
    mode = RunMode.INTERACTIVE if interactive else RunMode.AUTOMATED
    if mode is RunMode.INTERACTIVE and (yes or env_flag("CI")):
        logger.debug("Non-interactive run, applying without confirmation")
        mode = RunMode.AUTOMATED

    engine = ReconciliationEngine(
        project_dir,
        stores=_stores(project_dir, package_id, bundle_id, STORE_SOURCES),
        cache=StoreVersionCache(),
        confirm=_confirm,
    )
    try:
        report = engine.run(mode, apply_on_equal=True)
        _echo_report(report)

        if report.classification is None:
            local_next = next_version(report.canonical, BumpKind.BUILD)
            logger.info(f"🔢 No store data, bumping build number: {report.canonical} → {local_next}")
            if mode is RunMode.INTERACTIVE and not click.confirm(
                f"Update {report.canonical} to {local_next} on every platform?", default=True
            ):
                logger.info("❌ Version update cancelled")
                return
            apply_version(project_dir, local_next)
    except VersioningError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)
