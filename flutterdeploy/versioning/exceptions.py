"""
Exception classes for the versioning module.

Only fatal conditions are exceptions. Missing or unparsable sources and
failed store lookups are reported through ``ExtractionResult.error``.
"""

from typing import List, Optional


class VersioningError(Exception):
    """Base exception for all versioning-related errors."""

    pass


class VersionFormatError(VersioningError):
    """Raised when a version string has an invalid format."""

    def __init__(self, version_string: str, expected_format: str = "X.Y.Z+B"):
        self.version_string = version_string
        self.expected_format = expected_format
        super().__init__(
            f"Invalid version format: '{version_string}'. "
            f"Expected format: {expected_format}"
        )


class ManifestError(VersioningError):
    """Raised when the project manifest is missing or declares no usable version."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class WriteVerificationError(VersioningError):
    """Raised when a rewritten source does not read back the expected version.

    ``succeeded`` lists the sources already rewritten before the failure; they
    are left in their new state.
    """

    def __init__(
        self,
        source,
        expected,
        reason: str,
        succeeded: Optional[List] = None,
    ):
        self.source = source
        self.expected = expected
        self.reason = reason
        self.succeeded = list(succeeded or [])
        super().__init__(self._message())

    @property
    def failed(self):
        return self.source

    def _message(self) -> str:
        message = f"Failed to write {self.expected} to {self.source}: {self.reason}"
        if self.succeeded:
            done = ", ".join(str(s) for s in self.succeeded)
            message += f" (already updated: {done})"
        return message

    def with_succeeded(self, succeeded: List) -> "WriteVerificationError":
        return WriteVerificationError(
            self.source, self.expected, self.reason, succeeded=succeeded
        )


class TagError(VersioningError):
    """Raised when a deployment tag cannot be created or pushed."""

    def __init__(self, tag: str, reason: str):
        self.tag = tag
        self.reason = reason
        super().__init__(f"Tag {tag}: {reason}")
