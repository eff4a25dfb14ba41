import os
from pathlib import Path
from typing import Optional, Tuple

import click

from flutterdeploy.config import ProjectConfig
from flutterdeploy.versioning.sources import (
    read_android_package_id,
    read_ios_bundle_id,
    read_project_name,
)

from .logging import logger


def project_dir_option(cmd):
    """Add ``--project-dir/-C``; the command receives it as ``project_dir`` (a Path)."""
    return click.option(
        "-C",
        "--project-dir",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        default=".",
        show_default=True,
        help="Flutter project directory.",
    )(cmd)


def store_id_options(cmd):
    """Add ``--package-id`` and ``--bundle-id``, also read from the environment."""
    cmd = click.option(
        "--bundle-id",
        envvar="IOS_BUNDLE_ID",
        default=None,
        help="iOS bundle identifier. [env: IOS_BUNDLE_ID]",
    )(cmd)
    cmd = click.option(
        "--package-id",
        envvar="ANDROID_PACKAGE_ID",
        default=None,
        help="Android application id. [env: ANDROID_PACKAGE_ID]",
    )(cmd)
    return cmd


def default_identifier(project_root: Path) -> str:
    name = read_project_name(project_root) or Path(project_root).resolve().name
    return f"com.example.{name}"


def resolve_store_ids(
    project_root: Path,
    package_id: Optional[str] = None,
    bundle_id: Optional[str] = None,
) -> Tuple[str, str]:
    """
    Return ``(android_package_id, ios_bundle_id)``.

    Explicit values (options or environment) win, then ``project.config``,
    then the Android and iOS project files, then ``com.example.<name>``.
    """
    project_config = None

    if not package_id:
        project_config = ProjectConfig.load(project_root)
        package_id = project_config.package_name or read_android_package_id(project_root)
    if not bundle_id:
        project_config = project_config or ProjectConfig.load(project_root)
        bundle_id = project_config.bundle_id or read_ios_bundle_id(project_root)

    if not package_id or not bundle_id:
        fallback = default_identifier(project_root)
        if not package_id:
            logger.debug(f"No Android package id found, using {fallback}")
            package_id = fallback
        if not bundle_id:
            logger.debug(f"No iOS bundle id found, using {fallback}")
            bundle_id = fallback

    return package_id, bundle_id


def env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes")
