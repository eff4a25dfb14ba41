"""CLI commands that read and write the local version declarations."""

from pathlib import Path

import click

from flutterdeploy.cli.utils.logging import logger
from flutterdeploy.versioning import (
    BumpKind,
    ReconciliationEngine,
    VersionExtractor,
    VersioningError,
    VersionSource,
    VersionTuple,
    next_version,
)

from .debug import add_debug_option
from .report import print_status_table
from .utils.args import project_dir_option

BUMP_KINDS = [k.value for k in BumpKind]

SYNC_SOURCES = {
    "pubspec": (VersionSource.MANIFEST,),
    "android": (VersionSource.ANDROID_DESCRIPTOR,),
    "ios": (VersionSource.IOS_PLIST, VersionSource.IOS_PROJECT),
}


def _current(project_dir: Path) -> VersionTuple:
    engine = ReconciliationEngine(project_dir)
    return engine.current_version([engine.extractor.extract(VersionSource.MANIFEST, project_dir)])


def apply_version(project_dir: Path, version: VersionTuple):
    """Write *version* to every writable local source and log the outcome."""
    engine = ReconciliationEngine(project_dir)
    written = engine.write_all(version)
    logger.info(f"✅ Version {version} set for: {', '.join(s.label for s in written)}")
    return written


@add_debug_option
@click.command(name="current")
@project_dir_option
@click.option(
    "--part",
    type=click.Choice(["full", "name", "build"]),
    default="full",
    show_default=True,
    help="Print the full version, the version name or the build number.",
)
@click.pass_context
def current(ctx, project_dir, part):
    """Print the version declared in pubspec.yaml."""
    try:
        version = _current(project_dir)
    except VersioningError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)

    if part == "name":
        click.echo(version.name)
    elif part == "build":
        click.echo(str(version.build))
    else:
        click.echo(str(version))


@add_debug_option
@click.command(name="next")
@click.argument("kind", type=click.Choice(BUMP_KINDS))
@project_dir_option
@click.pass_context
def next_(ctx, kind, project_dir):
    """Print the version a bump of KIND would produce, without writing it."""
    try:
        version = _current(project_dir)
    except VersioningError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)
    click.echo(str(next_version(version, kind)))


@add_debug_option
@click.command(name="bump")
@click.argument("kind", type=click.Choice(BUMP_KINDS))
@project_dir_option
@click.pass_context
def bump(ctx, kind, project_dir):
    """Bump the version by KIND and write it to every platform."""
    try:
        version = _current(project_dir)
        new_version = next_version(version, kind)
        logger.info(f"🎯 Bumping {kind}: {version} → {new_version}")
        apply_version(project_dir, new_version)
    except VersioningError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)


@add_debug_option
@click.command(name="set")
@click.argument("version")
@project_dir_option
@click.pass_context
def set_(ctx, version, project_dir):
    """Set VERSION (MAJOR.MINOR.PATCH+BUILD) on every platform."""
    try:
        target = VersionTuple.parse_strict(version)
    except VersioningError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)

    logger.info(f"🎯 Setting version {target} for all platforms...")
    try:
        apply_version(project_dir, target)
    except VersioningError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)


@add_debug_option
@click.command(name="sync")
@click.argument(
    "source", type=click.Choice(list(SYNC_SOURCES)), default="pubspec", required=False
)
@project_dir_option
@click.pass_context
def sync(ctx, source, project_dir):
    """Copy the version of SOURCE (default: pubspec) to every platform."""
    extractor = VersionExtractor()
    candidates = [extractor.extract(s, project_dir) for s in SYNC_SOURCES[source]]
    found = next((r for r in candidates if r.ok), None)
    if found is None:
        reasons = "; ".join(f"{r.source.label}: {r.detail}" for r in candidates)
        logger.error(f"Error: no version to sync from {source} ({reasons})")
        ctx.exit(1)

    logger.info(f"🔄 Synchronizing from {found.source.label}: {found.parsed}")
    try:
        apply_version(project_dir, found.parsed)
    except VersioningError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)


@add_debug_option
@click.command(name="status")
@project_dir_option
@click.pass_context
def status(ctx, project_dir):
    """Show the version declared by every platform file."""
    results = VersionExtractor().extract_all(project_dir)
    manifest = results[0]
    print_status_table(results, canonical=manifest.parsed)

    readable = [r.parsed for r in results if r.ok]
    if not manifest.ok:
        logger.error(f"Error: pubspec.yaml: {manifest.detail}")
        ctx.exit(1)
    if all(v == manifest.parsed for v in readable):
        click.echo("✅ All platforms are synchronized")
    else:
        click.echo("⚠️  Platforms are NOT synchronized")
        click.echo("💡 Run 'fdk sync pubspec' to use pubspec.yaml as the source")
