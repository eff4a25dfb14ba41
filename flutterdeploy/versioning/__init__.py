"""
Versioning module for flutterdeploy.

A Flutter app declares its version in several places: ``pubspec.yaml``, the
Android build descriptor, the iOS ``Info.plist`` and the Xcode project. The
stores hold the last published version. This module keeps all of them in
agreement.

LAYERS:
=======

1. **Core version logic** (version.py):
   - VersionTuple: ``MAJOR.MINOR.PATCH+BUILD`` with total ordering
   - compare, next_version, next_from_store, highest_of

2. **Sources** (sources.py, writer.py):
   - VersionExtractor reads one local declaration into an ExtractionResult
   - VersionWriter rewrites it and reads it back

3. **Stores** (stores.py, cache.py):
   - StoreVersionFetcher queries Google Play and the App Store
   - StoreVersionCache keeps the last versions seen for other tooling

4. **Reconciliation** (engine.py):
   - ReconciliationEngine gathers everything concurrently, classifies the
     local version against the stores and applies the recommendation

5. **Tagging** (tag.py, git.py):
   - generate_live_tag builds the live deployment tag
   - GitTagSink creates and pushes it

6. **Exceptions** (exceptions.py):
   - Fatal conditions only; everything else is an ErrorKind on a result
"""

from .cache import StoreVersionCache
from .engine import (
    ReconciliationEngine,
    ReconciliationReport,
    RunMode,
    writable_sources,
)
from .exceptions import (
    ManifestError,
    TagError,
    VersionFormatError,
    VersioningError,
    WriteVerificationError,
)
from .git import GitTagSink
from .sources import (
    LOCAL_SOURCES,
    STORE_SOURCES,
    ErrorKind,
    ExtractionResult,
    VersionExtractor,
    VersionSource,
)
from .stores import StoreVersionFetcher
from .tag import generate_live_tag, parse_live_tag, resolve_platform_versions
from .version import (
    BumpKind,
    Comparison,
    VersionTuple,
    compare,
    highest_of,
    next_from_store,
    next_version,
    parse_store_version,
)
from .writer import VersionWriter

__all__ = [
    # Core version utilities
    "VersionTuple",
    "Comparison",
    "BumpKind",
    "compare",
    "next_version",
    "next_from_store",
    "highest_of",
    "parse_store_version",
    # Sources
    "VersionSource",
    "ErrorKind",
    "ExtractionResult",
    "VersionExtractor",
    "VersionWriter",
    "LOCAL_SOURCES",
    "STORE_SOURCES",
    # Stores
    "StoreVersionFetcher",
    "StoreVersionCache",
    # Reconciliation
    "ReconciliationEngine",
    "ReconciliationReport",
    "RunMode",
    "writable_sources",
    # Tagging
    "generate_live_tag",
    "parse_live_tag",
    "resolve_platform_versions",
    "GitTagSink",
    # Exceptions
    "VersioningError",
    "VersionFormatError",
    "ManifestError",
    "WriteVerificationError",
    "TagError",
]
