"""Rewrite version declarations in place and verify them by reading back."""

import logging
from pathlib import Path

from flutterdeploy import constants

from .exceptions import WriteVerificationError
from .sources import (
    MANIFEST_VERSION,
    DescriptorSyntax,
    VersionExtractor,
    VersionSource,
    read_text,
    syntax_for,
)
from .version import VersionTuple

logger = logging.getLogger(__name__)


class VersionWriter:
    """
    Writes a version into one local source using the inverse of its read rule.

    Every write touches exactly one file, preserves everything but the
    version fields, and is verified by re-extracting the source. Writing the
    same version twice leaves the file byte-identical.
    """

    def __init__(self, extractor: VersionExtractor = None):
        self.extractor = extractor or VersionExtractor()

    def write(self, version: VersionTuple, source: VersionSource, project_root: Path) -> Path:
        """
        Write *version* into *source* and verify it.

        Returns:
            The path of the rewritten file

        Raises:
            WriteVerificationError: If the file is missing, has no field to
                rewrite, cannot be written, or reads back a different version
        """
        project_root = Path(project_root)
        if not source.is_local:
            raise ValueError(f"{source.label} is not a local version source")

        if source is VersionSource.MANIFEST:
            path = project_root / constants.PUBSPEC_FILE
            self._rewrite(
                path, source, version, lambda text: self._manifest_content(text, version)
            )
        else:
            syntax = syntax_for(source, project_root)
            if syntax is None:
                raise WriteVerificationError(source, version, "no descriptor file found")
            path = syntax.path(project_root)
            self._rewrite(
                path,
                source,
                version,
                lambda text: self._descriptor_content(syntax, text, version),
            )

        self._verify(version, source, project_root)
        logger.info(f"   ✅ {source.label} updated to {version}")
        return path

    def _rewrite(self, path: Path, source: VersionSource, version: VersionTuple, transform):
        if not path.exists():
            raise WriteVerificationError(source, version, f"{path} not found")
        try:
            original = read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            raise WriteVerificationError(source, version, f"cannot read {path}: {e}")

        updated = transform(original)
        if updated is None:
            raise WriteVerificationError(
                source, version, f"no version declaration to rewrite in {path}"
            )
        if updated == original:
            logger.debug(f"{path} already declares {version}")
            return
        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(updated)
        except OSError as e:
            raise WriteVerificationError(source, version, f"cannot write {path}: {e}")

    @staticmethod
    def _manifest_content(text: str, version: VersionTuple):
        updated, count = MANIFEST_VERSION.replace(text, str(version))
        return updated if count else None

    @staticmethod
    def _descriptor_content(syntax: DescriptorSyntax, text: str, version: VersionTuple):
        updated, names = syntax.name.replace(text, version.name)
        updated, builds = syntax.build.replace(updated, str(version.build))
        if not names or not builds:
            return None
        return updated

    def _verify(self, version: VersionTuple, source: VersionSource, project_root: Path):
        result = self.extractor.extract(source, project_root)
        if result.parsed != version:
            raise WriteVerificationError(
                source,
                version,
                f"read back {result.describe()} after writing",
            )
