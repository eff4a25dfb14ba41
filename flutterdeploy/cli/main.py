"""flutterdeploy CLI"""

import click

from flutterdeploy import __version__
from flutterdeploy.cli.compare import compare, compare_all, compare_android, smart_bump
from flutterdeploy.cli.tag import tag
from flutterdeploy.cli.version import bump, current, next_, set_, status, sync

from .debug import add_debug_option


@click.group()
@click.version_option(__version__, prog_name="flutterdeploy")
@click.pass_context
def cli(ctx):
    """
    Flutter deployment kit: keep app versions in sync across pubspec.yaml,
    Android, iOS and the stores.
    """
    ctx.ensure_object(dict)


for command in (
    current,
    next_,
    bump,
    set_,
    sync,
    status,
    compare,
    compare_android,
    compare_all,
    smart_bump,
    tag,
):
    cli.add_command(command)

add_debug_option(cli)

if __name__ == "__main__":
    cli(obj={})
