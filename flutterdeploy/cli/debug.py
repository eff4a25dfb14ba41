from functools import wraps

import click

from .utils.logging import configure_logging


def add_debug_option(cmd):
    """Decorator to add the debug option to commands and groups"""
    if isinstance(cmd, click.Command):
        # Already a command or group, e.g. the ``fdk`` group in main.py
        if not any(param.name == "debug" for param in cmd.params):
            cmd.params.insert(
                0,
                click.Option(
                    ["--debug/--no-debug"],
                    is_eager=True,
                    expose_value=False,
                    callback=lambda ctx, param, value: _set_debug(ctx, value),
                    help="Enable debug mode",
                ),
            )
        return cmd

    # Plain function, decorated before click.command turns it into a command
    @click.option(
        "--debug/--no-debug",
        is_eager=True,
        expose_value=False,
        callback=lambda ctx, param, value: _set_debug(ctx, value),
        help="Enable debug mode",
    )
    @wraps(cmd)
    def wrapper(*args, **kwargs):
        return cmd(*args, **kwargs)

    return wrapper


def _set_debug(ctx, value: bool):
    """Callback for the debug flag, shared by ``fdk`` and every subcommand"""
    # The flag lives on the root context so ``fdk --debug bump`` and
    # ``fdk bump --debug`` end up in the same place
    root_ctx = ctx.find_root()
    root_ctx.ensure_object(dict)

    # 1 for ``fdk`` itself, 2 for a subcommand
    cmd_depth = len(ctx.command_path.split())

    if "DEBUG" not in root_ctx.obj:
        root_ctx.obj["DEBUG"] = False

    # A subcommand may switch debug on but never off;
    # only the top-level ``--no-debug`` can turn it off
    if value is True or cmd_depth == 1:
        root_ctx.obj["DEBUG"] = value

    configure_logging(root_ctx.obj["DEBUG"])
    return root_ctx.obj["DEBUG"]
