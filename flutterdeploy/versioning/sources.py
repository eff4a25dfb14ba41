"""
Version declaration sources and the rules used to read them.

Every local source is a text file in the Flutter project tree. Each one is
described by one or more declaration syntaxes; a syntax pairs a file with the
regular expressions locating its version-name and build-number fields. Every
pattern has three groups (prefix, value, suffix) so the same rule serves for
reading and, in ``writer.py``, for rewriting the value in place.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Pattern, Sequence, Tuple

import yaml

from flutterdeploy import constants

from .exceptions import VersionFormatError
from .version import VersionTuple

logger = logging.getLogger(__name__)

PLACEHOLDER_MARKER = "$("


class VersionSource(str, Enum):
    MANIFEST = "pubspec"
    ANDROID_DESCRIPTOR = "android"
    IOS_PLIST = "ios-plist"
    IOS_PROJECT = "ios-project"
    GOOGLE_PLAY = "google-play"
    APP_STORE = "app-store"

    @property
    def is_local(self) -> bool:
        return self in LOCAL_SOURCES

    @property
    def label(self) -> str:
        return _LABELS[self]

    def __str__(self) -> str:
        return self.label


_LABELS = {
    VersionSource.MANIFEST: "pubspec.yaml",
    VersionSource.ANDROID_DESCRIPTOR: "Android build.gradle",
    VersionSource.IOS_PLIST: "iOS Info.plist",
    VersionSource.IOS_PROJECT: "iOS project.pbxproj",
    VersionSource.GOOGLE_PLAY: "Google Play",
    VersionSource.APP_STORE: "App Store",
}

# Fixed order used for reporting and for sequential writes
LOCAL_SOURCES: Tuple[VersionSource, ...] = (
    VersionSource.MANIFEST,
    VersionSource.ANDROID_DESCRIPTOR,
    VersionSource.IOS_PLIST,
    VersionSource.IOS_PROJECT,
)
STORE_SOURCES: Tuple[VersionSource, ...] = (
    VersionSource.GOOGLE_PLAY,
    VersionSource.APP_STORE,
)


class ErrorKind(str, Enum):
    SOURCE_MISSING = "source-missing"
    SOURCE_UNPARSABLE = "source-unparsable"
    UNRESOLVED_PLACEHOLDER = "unresolved-placeholder"
    NETWORK_UNAVAILABLE = "network-unavailable"
    REMOTE_PARSE_FAILURE = "remote-parse-failure"


@dataclass
class ExtractionResult:
    """Outcome of reading one version source. ``parsed`` is None on failure."""

    source: VersionSource
    raw: Optional[str] = None
    parsed: Optional[VersionTuple] = None
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None
    path: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return self.parsed is not None

    def describe(self) -> str:
        if self.ok:
            return str(self.parsed)
        if self.error is None:
            return "unknown"
        return f"unavailable ({self.error.value}: {self.detail})"


@dataclass(frozen=True)
class FieldRule:
    """A ``(prefix)(value)(suffix)`` pattern for one declared field.

    ``count`` is the number of occurrences rewritten (0 means all); reads
    always use the first occurrence.
    """

    pattern: Pattern[str]
    count: int = 0

    def find(self, text: str) -> Optional[str]:
        match = self.pattern.search(text)
        if match is None:
            return None
        return match.group(2).strip().strip("\"'")

    def replace(self, text: str, value: str) -> Tuple[str, int]:
        return self.pattern.subn(
            lambda m: f"{m.group(1)}{value}{m.group(3)}", text, count=self.count
        )


@dataclass(frozen=True)
class DescriptorSyntax:
    """Where and how a platform descriptor declares its name/build pair."""

    relpath: str
    name: FieldRule
    build: FieldRule
    label: str
    # Declarations that hand both fields to the Flutter tool at build time
    delegation: Optional[Pattern[str]] = None

    def path(self, project_root: Path) -> Path:
        return Path(project_root) / self.relpath


MANIFEST_VERSION = FieldRule(
    re.compile(r"^(version:[ \t]*[\"']?)([^\s#\"']*)([^\n]*)$", re.MULTILINE),
    count=1,
)

_FLUTTER_DELEGATION = re.compile(
    r"version(?:Name|Code)\s*=?\s*flutter(?:\.v|V)ersion(?:Name|Code)"
)

# Tried in order; the first file that exists and parses wins.
ANDROID_SYNTAXES: Tuple[DescriptorSyntax, ...] = (
    DescriptorSyntax(
        relpath=constants.ANDROID_BUILD_GRADLE_KTS,
        name=FieldRule(re.compile(r'(versionName\s*=\s*")([^"]*)(")')),
        build=FieldRule(re.compile(r"(versionCode\s*=\s*)([0-9]+)()")),
        label="build.gradle.kts",
        delegation=_FLUTTER_DELEGATION,
    ),
    DescriptorSyntax(
        relpath=constants.ANDROID_BUILD_GRADLE,
        name=FieldRule(re.compile(r'(versionName\s*")([^"]*)(")')),
        build=FieldRule(re.compile(r"(versionCode\s+)([0-9]+)()")),
        label="build.gradle",
        delegation=_FLUTTER_DELEGATION,
    ),
)

IOS_PLIST_SYNTAX = DescriptorSyntax(
    relpath=constants.IOS_INFO_PLIST,
    name=FieldRule(
        re.compile(
            r"(<key>CFBundleShortVersionString</key>\s*<string>)([^<]*)(</string>)"
        )
    ),
    build=FieldRule(
        re.compile(r"(<key>CFBundleVersion</key>\s*<string>)([^<]*)(</string>)")
    ),
    label="Info.plist",
)

IOS_PROJECT_SYNTAX = DescriptorSyntax(
    relpath=constants.IOS_PBXPROJ,
    name=FieldRule(re.compile(r"(MARKETING_VERSION\s*=\s*)([^;]*)(;)")),
    build=FieldRule(re.compile(r"(CURRENT_PROJECT_VERSION\s*=\s*)([^;]*)(;)")),
    label="project.pbxproj",
)


def read_text(path: Path) -> str:
    # newline="" keeps CRLF files byte-identical on rewrite
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def parse_manifest(text: str) -> Tuple[Optional[str], Optional[VersionTuple]]:
    """Return the raw and parsed top-level ``version:`` value of a pubspec."""
    raw = MANIFEST_VERSION.find(text)
    if not raw:
        return None, None
    try:
        return raw, VersionTuple.parse(raw)
    except VersionFormatError:
        return raw, None


def parse_descriptor(
    syntax: DescriptorSyntax, text: str
) -> Tuple[Optional[str], Optional[VersionTuple], Optional[ErrorKind], str]:
    """
    Parse a name/build pair declared with *syntax*.

    Returns ``(raw, parsed, error, detail)``; exactly one of ``parsed`` and
    ``error`` is set.
    """
    name = syntax.name.find(text)
    build = syntax.build.find(text)
    if name is None or build is None:
        delegated = syntax.delegation.search(text) if syntax.delegation else None
        if delegated is not None:
            return (
                None,
                None,
                ErrorKind.UNRESOLVED_PLACEHOLDER,
                f"{syntax.label} delegates to the Flutter build ({delegated.group(0)})",
            )
        missing = "version name" if name is None else "build number"
        return None, None, ErrorKind.SOURCE_UNPARSABLE, f"no literal {missing}"

    raw = f"{name}+{build}"
    if PLACEHOLDER_MARKER in name or PLACEHOLDER_MARKER in build:
        return (
            raw,
            None,
            ErrorKind.UNRESOLVED_PLACEHOLDER,
            f"{syntax.label} delegates to build settings ({raw})",
        )
    try:
        return raw, VersionTuple.from_parts(name, build), None, ""
    except (VersionFormatError, ValueError) as e:
        return raw, None, ErrorKind.SOURCE_UNPARSABLE, str(e)


def select_android_syntax(project_root: Path) -> Optional[DescriptorSyntax]:
    """
    Pick the Android descriptor syntax in use.

    The first existing file that parses wins; otherwise the first existing
    file; None when there is no Android descriptor at all.
    """
    first_existing = None
    for syntax in ANDROID_SYNTAXES:
        path = syntax.path(project_root)
        if not path.exists():
            continue
        if first_existing is None:
            first_existing = syntax
        try:
            _, parsed, _, _ = parse_descriptor(syntax, read_text(path))
        except (OSError, UnicodeDecodeError):
            continue
        if parsed is not None:
            return syntax
    return first_existing


def syntax_for(source: VersionSource, project_root: Path) -> Optional[DescriptorSyntax]:
    if source is VersionSource.ANDROID_DESCRIPTOR:
        return select_android_syntax(project_root)
    if source is VersionSource.IOS_PLIST:
        return IOS_PLIST_SYNTAX
    if source is VersionSource.IOS_PROJECT:
        return IOS_PROJECT_SYNTAX
    return None


class VersionExtractor:
    """Reads the declared version of one local source. Never raises."""

    def extract(self, source: VersionSource, project_root: Path) -> ExtractionResult:
        project_root = Path(project_root)
        if not source.is_local:
            raise ValueError(f"{source} is not a local version source")
        try:
            if source is VersionSource.MANIFEST:
                result = self._extract_manifest(project_root)
            elif source is VersionSource.ANDROID_DESCRIPTOR:
                result = self._extract_android(project_root)
            else:
                result = self._extract_descriptor(
                    source, syntax_for(source, project_root), project_root
                )
        except (OSError, UnicodeDecodeError) as e:
            result = ExtractionResult(
                source, error=ErrorKind.SOURCE_UNPARSABLE, detail=f"unreadable: {e}"
            )

        if result.ok:
            logger.debug(f"{source.label}: {result.parsed}")
        else:
            logger.debug(f"{source.label}: {result.error.value} ({result.detail})")
        return result

    def extract_all(
        self, project_root: Path, sources: Sequence[VersionSource] = LOCAL_SOURCES
    ):
        return [self.extract(source, project_root) for source in sources]

    def _extract_manifest(self, project_root: Path) -> ExtractionResult:
        path = project_root / constants.PUBSPEC_FILE
        source = VersionSource.MANIFEST
        if not path.exists():
            return ExtractionResult(
                source, error=ErrorKind.SOURCE_MISSING, detail=f"{path} not found", path=path
            )
        raw, parsed = parse_manifest(read_text(path))
        if raw is None:
            return ExtractionResult(
                source,
                error=ErrorKind.SOURCE_UNPARSABLE,
                detail="no top-level 'version:' key",
                path=path,
            )
        if parsed is None:
            return ExtractionResult(
                source,
                raw=raw,
                error=ErrorKind.SOURCE_UNPARSABLE,
                detail=f"'{raw}' is not X.Y.Z+B",
                path=path,
            )
        return ExtractionResult(source, raw=raw, parsed=parsed, path=path)

    def _extract_android(self, project_root: Path) -> ExtractionResult:
        source = VersionSource.ANDROID_DESCRIPTOR
        first_failure = None
        for syntax in ANDROID_SYNTAXES:
            path = syntax.path(project_root)
            if not path.exists():
                continue
            result = self._extract_descriptor(source, syntax, project_root)
            if result.ok:
                return result
            if first_failure is None:
                first_failure = result

        if first_failure is not None:
            return first_failure
        return ExtractionResult(
            source,
            error=ErrorKind.SOURCE_MISSING,
            detail="no android/app/build.gradle(.kts)",
        )

    def _extract_descriptor(
        self, source: VersionSource, syntax: DescriptorSyntax, project_root: Path
    ) -> ExtractionResult:
        path = syntax.path(project_root)
        if not path.exists():
            return ExtractionResult(
                source, error=ErrorKind.SOURCE_MISSING, detail=f"{path} not found", path=path
            )
        raw, parsed, error, detail = parse_descriptor(syntax, read_text(path))
        return ExtractionResult(
            source, raw=raw, parsed=parsed, error=error, detail=detail or None, path=path
        )


# Identifiers


def read_project_name(project_root: Path) -> Optional[str]:
    """The pubspec ``name``, or None."""
    path = Path(project_root) / constants.PUBSPEC_FILE
    if not path.exists():
        return None
    try:
        data = yaml.safe_load(read_text(path))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.debug(f"Could not read project name from {path}: {e}")
        return None
    if not isinstance(data, dict) or not data.get("name"):
        return None
    return str(data["name"]).strip()


_APPLICATION_ID_PATTERNS = (
    re.compile(r'applicationId\s*=\s*"([^"]+)"'),
    re.compile(r'applicationId\s+"([^"]+)"'),
    re.compile(r'namespace\s*=?\s*"([^"]+)"'),
)


def read_android_package_id(project_root: Path) -> Optional[str]:
    """``applicationId`` (then ``namespace``) from the descriptor, then the manifest ``package``."""
    project_root = Path(project_root)
    for syntax in ANDROID_SYNTAXES:
        path = syntax.path(project_root)
        if not path.exists():
            continue
        try:
            text = read_text(path)
        except (OSError, UnicodeDecodeError):
            continue
        for pattern in _APPLICATION_ID_PATTERNS:
            match = pattern.search(text)
            if match:
                return match.group(1).strip()

    manifest = project_root / constants.ANDROID_MANIFEST
    if manifest.exists():
        try:
            match = re.search(r'package="([^"]+)"', read_text(manifest))
        except (OSError, UnicodeDecodeError):
            match = None
        if match:
            return match.group(1).strip()
    return None


def read_ios_bundle_id(project_root: Path) -> Optional[str]:
    """``CFBundleIdentifier`` from Info.plist unless it is a build setting reference."""
    path = Path(project_root) / constants.IOS_INFO_PLIST
    if not path.exists():
        return None
    try:
        match = re.search(
            r"<key>CFBundleIdentifier</key>\s*<string>([^<]+)</string>",
            read_text(path),
        )
    except (OSError, UnicodeDecodeError):
        return None
    if not match:
        return None
    bundle_id = match.group(1).strip()
    if PLACEHOLDER_MARKER in bundle_id or "PRODUCT_BUNDLE_IDENTIFIER" in bundle_id:
        return None
    return bundle_id
