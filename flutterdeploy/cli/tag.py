"""CLI command for the live deployment tag."""

import click

from flutterdeploy.cli.utils.logging import logger
from flutterdeploy.versioning import (
    GitTagSink,
    VersioningError,
    generate_live_tag,
    resolve_platform_versions,
)

from .debug import add_debug_option
from .utils.args import project_dir_option


@add_debug_option
@click.command(name="tag")
@project_dir_option
@click.option("--create", is_flag=True, default=False, help="Create the tag on HEAD.")
@click.option(
    "--push", is_flag=True, default=False, help="Push the tag to the remote (implies --create)."
)
@click.option("--remote", default="origin", show_default=True, help="Remote to push to.")
@click.pass_context
def tag(ctx, project_dir, create, push, remote):
    """Print the live deployment tag for the current platform versions."""
    try:
        android, ios = resolve_platform_versions(project_dir)
    except VersioningError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)

    for result in (android, ios):
        logger.debug(f"{result.source.label}: {result.parsed}")
    tag_name = generate_live_tag(android.parsed, ios.parsed)
    click.echo(tag_name)

    if not (create or push):
        return
    sink = GitTagSink(project_dir, remote=remote)
    try:
        sink.create(tag_name, message=f"Live deployment {tag_name}")
        if push:
            sink.push(tag_name)
    except VersioningError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)
