"""
Version utility module for Flutter app versions.

A Flutter app version has four numeric fields, ``MAJOR.MINOR.PATCH+BUILD``.
The first three form the user-visible version name (Android ``versionName``,
iOS ``CFBundleShortVersionString``); the build number is the monotonically
increasing store counter (Android ``versionCode``, iOS ``CFBundleVersion``).
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from flutterdeploy.constants import DEFAULT_BUILD_NUMBER, SYNTHETIC_STORE_BUILD

from .exceptions import VersionFormatError

_FULL_RE = re.compile(r"^([0-9]+)\.([0-9]+)\.([0-9]+)\+([0-9]+)$")
_LENIENT_RE = re.compile(r"^([0-9]+)\.([0-9]+)\.([0-9]+)(?:\+([0-9]+))?$")
_NAME_RE = re.compile(r"^([0-9]+)\.([0-9]+)\.([0-9]+)$")
_STORE_RE = re.compile(r"^([0-9]+)\.([0-9]+)(?:\.([0-9]+))?(?:\+([0-9]+))?$")
_BUILD_RE = re.compile(r"^[0-9]+$")


class Comparison(str, Enum):
    """Result of comparing version ``a`` against version ``b``."""

    HIGHER = "higher"
    EQUAL = "equal"
    LOWER = "lower"

    def inverse(self) -> "Comparison":
        if self is Comparison.HIGHER:
            return Comparison.LOWER
        if self is Comparison.LOWER:
            return Comparison.HIGHER
        return Comparison.EQUAL


class BumpKind(str, Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    BUILD = "build"


@dataclass(frozen=True, order=True)
class VersionTuple:
    """
    An ordered ``(major, minor, patch, build)`` version.

    Ordering is lexicographic over the four fields, which is what the stores
    use to reject uploads.
    """

    major: int
    minor: int
    patch: int
    build: int = DEFAULT_BUILD_NUMBER

    def __post_init__(self):
        for name in ("major", "minor", "patch", "build"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")

    @property
    def name(self) -> str:
        """Version name without the build number, e.g. ``1.2.0``."""
        return f"{self.major}.{self.minor}.{self.patch}"

    def __str__(self) -> str:
        return f"{self.name}+{self.build}"

    def __repr__(self) -> str:
        return f"VersionTuple('{self}')"

    def with_build(self, build: int) -> "VersionTuple":
        return VersionTuple(self.major, self.minor, self.patch, build)

    @classmethod
    def parse(cls, version_string: str) -> "VersionTuple":
        """
        Parse ``X.Y.Z+B`` or ``X.Y.Z``.

        A missing build number defaults to ``DEFAULT_BUILD_NUMBER``.

        Raises:
            VersionFormatError: If the string is not a version
        """
        text = str(version_string).strip()
        match = _LENIENT_RE.match(text)
        if not match:
            raise VersionFormatError(text, "X.Y.Z+B or X.Y.Z")
        major, minor, patch, build = match.groups()
        return cls(
            int(major),
            int(minor),
            int(patch),
            int(build) if build is not None else DEFAULT_BUILD_NUMBER,
        )

    @classmethod
    def parse_strict(cls, version_string: str) -> "VersionTuple":
        """Parse a user-supplied ``X.Y.Z+B``; every field is required."""
        text = str(version_string).strip()
        match = _FULL_RE.match(text)
        if not match:
            raise VersionFormatError(text)
        return cls(*(int(g) for g in match.groups()))

    @classmethod
    def from_parts(cls, name: str, build: Optional[str]) -> "VersionTuple":
        """Combine a platform version name and build counter.

        Raises:
            VersionFormatError: If either part is malformed
        """
        name = str(name).strip()
        match = _NAME_RE.match(name)
        if not match:
            raise VersionFormatError(name, "X.Y.Z")
        if build is None or not str(build).strip():
            build_number = DEFAULT_BUILD_NUMBER
        else:
            build_text = str(build).strip()
            if not _BUILD_RE.match(build_text):
                raise VersionFormatError(build_text, "a non-negative build number")
            build_number = int(build_text)
        major, minor, patch = (int(g) for g in match.groups())
        return cls(major, minor, patch, build_number)


def parse_store_version(version_string: str) -> VersionTuple:
    """
    Parse a version published by a store.

    Stores expose ``X.Y.Z`` (sometimes ``X.Y``) but no build counter, so a
    synthetic build number is attached; a missing patch becomes ``0``.
    """
    text = str(version_string).strip()
    match = _STORE_RE.match(text)
    if not match:
        raise VersionFormatError(text, "X.Y.Z")
    major, minor, patch, build = match.groups()
    return VersionTuple(
        int(major),
        int(minor),
        int(patch) if patch is not None else 0,
        int(build) if build is not None else SYNTHETIC_STORE_BUILD,
    )


def compare(a: VersionTuple, b: VersionTuple) -> Comparison:
    """Compare ``a`` against ``b``: major, minor, patch first, then build."""
    if a > b:
        return Comparison.HIGHER
    if a < b:
        return Comparison.LOWER
    return Comparison.EQUAL


def next_version(current: VersionTuple, kind) -> VersionTuple:
    """
    Return the version following *current* for a bump of *kind*.

    Every bump increments the build counter. Major, minor and patch bumps
    reset the lower semantic fields to 0.

    Raises:
        ValueError: If *kind* is not a known bump kind
    """
    try:
        kind = BumpKind(kind)
    except ValueError:
        raise ValueError(
            f"Unknown bump kind: {kind}. Use one of: "
            + ", ".join(k.value for k in BumpKind)
        )

    build = current.build + 1
    if kind is BumpKind.MAJOR:
        return VersionTuple(current.major + 1, 0, 0, build)
    if kind is BumpKind.MINOR:
        return VersionTuple(current.major, current.minor + 1, 0, build)
    if kind is BumpKind.PATCH:
        return VersionTuple(current.major, current.minor, current.patch + 1, build)
    return current.with_build(build)


def next_from_store(store: VersionTuple) -> VersionTuple:
    """Keep the store's version name and move one build past it."""
    return store.with_build(store.build + 1)


def highest_of(versions: Iterable[VersionTuple]) -> VersionTuple:
    """
    Return the highest version.

    Raises:
        ValueError: If *versions* is empty
    """
    versions = list(versions)
    if not versions:
        raise ValueError("highest_of() requires at least one version")
    highest = versions[0]
    for candidate in versions[1:]:
        if compare(candidate, highest) is Comparison.HIGHER:
            highest = candidate
    return highest
