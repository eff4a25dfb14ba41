"""Live deployment tag names, e.g. ``live_android-v1.0.0(5)_ios-v1.0.0(5)``."""

import logging
import re
from pathlib import Path
from typing import Tuple

from flutterdeploy.constants import LIVE_TAG_PREFIX

from .exceptions import ManifestError
from .sources import ExtractionResult, VersionExtractor, VersionSource
from .version import VersionTuple

logger = logging.getLogger(__name__)

_LIVE_TAG_RE = re.compile(
    r"^" + LIVE_TAG_PREFIX + r"_android-v([0-9]+)\.([0-9]+)\.([0-9]+)\(([0-9]+)\)"
    r"_ios-v([0-9]+)\.([0-9]+)\.([0-9]+)\(([0-9]+)\)$"
)


def _platform_part(platform: str, version: VersionTuple) -> str:
    return f"{platform}-v{version.name}({version.build})"


def generate_live_tag(android: VersionTuple, ios: VersionTuple) -> str:
    """
    Build the tag that triggers a live deployment.

    Raises:
        TypeError: If either version is not a VersionTuple
    """
    for platform, version in (("android", android), ("ios", ios)):
        if not isinstance(version, VersionTuple):
            raise TypeError(
                f"{platform} version must be a VersionTuple, got {type(version).__name__}"
            )
    return (
        f"{LIVE_TAG_PREFIX}_{_platform_part('android', android)}"
        f"_{_platform_part('ios', ios)}"
    )


def parse_live_tag(tag: str) -> Tuple[VersionTuple, VersionTuple]:
    """Return the ``(android, ios)`` versions encoded in a live tag.

    Raises:
        ValueError: If *tag* is not a live tag
    """
    match = _LIVE_TAG_RE.match(tag.strip())
    if not match:
        raise ValueError(f"Not a live deployment tag: '{tag}'")
    numbers = [int(g) for g in match.groups()]
    return VersionTuple(*numbers[:4]), VersionTuple(*numbers[4:])


def _first_ok(*results: ExtractionResult) -> ExtractionResult:
    for result in results:
        if result.ok:
            return result
    return results[-1]


def resolve_platform_versions(
    project_root: Path, extractor: VersionExtractor = None
) -> Tuple[ExtractionResult, ExtractionResult]:
    """
    Versions to tag for each platform.

    Android comes from its build descriptor, iOS from Info.plist and then
    project.pbxproj; either falls back to the pubspec when its platform
    files do not declare a literal version.

    Raises:
        ManifestError: If a fallback to the pubspec is needed and fails
    """
    extractor = extractor or VersionExtractor()
    project_root = Path(project_root)
    manifest = extractor.extract(VersionSource.MANIFEST, project_root)

    android = _first_ok(
        extractor.extract(VersionSource.ANDROID_DESCRIPTOR, project_root), manifest
    )
    ios = _first_ok(
        extractor.extract(VersionSource.IOS_PLIST, project_root),
        extractor.extract(VersionSource.IOS_PROJECT, project_root),
        manifest,
    )
    if not android.ok or not ios.ok:
        raise ManifestError(
            str(manifest.path or "pubspec.yaml"), manifest.detail or "no version"
        )
    for platform, result in (("Android", android), ("iOS", ios)):
        if result.source is VersionSource.MANIFEST:
            logger.warning(f"⚠️  No {platform} version declared, using pubspec.yaml")
    return android, ios
