"""
Cross-platform version reconciliation.

The engine reads every local declaration and every configured store
concurrently, compares the project's canonical version (the pubspec) with the
highest published version, and decides whether a new version is needed.
Depending on the run mode it then rewrites every local declaration, one file
at a time in a fixed order.

All reads happen before the comparison and all writes after the decision; no
other ordering or locking is required. A failed write stops the remaining
writes and leaves the files already updated in their new state; running the
reconciliation again is the recovery path.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .cache import StoreVersionCache
from .exceptions import ManifestError, WriteVerificationError
from .sources import (
    LOCAL_SOURCES,
    ErrorKind,
    ExtractionResult,
    VersionExtractor,
    VersionSource,
)
from .stores import StoreVersionFetcher
from .version import Comparison, VersionTuple, compare, highest_of, next_from_store
from .writer import VersionWriter

logger = logging.getLogger(__name__)


class RunMode(str, Enum):
    REPORT = "report"
    AUTOMATED = "automated"
    INTERACTIVE = "interactive"


@dataclass
class ReconciliationReport:
    local_results: List[ExtractionResult]
    store_results: List[ExtractionResult]
    canonical: VersionTuple
    classification: Optional[Comparison] = None
    recommended: Optional[VersionTuple] = None
    highest_store: Optional[VersionTuple] = None
    applied: bool = False
    written: List[VersionSource] = field(default_factory=list)
    cached_store: Optional[str] = None

    @property
    def store_versions(self) -> List[VersionTuple]:
        return [r.parsed for r in self.store_results if r.ok]


def writable_sources(local_results: Sequence[ExtractionResult]) -> List[VersionSource]:
    """
    Local sources a new version is written to, in write order.

    The pubspec is always rewritten when present. Other sources are
    rewritten only when they currently declare a literal version:
    missing files are skipped and descriptors that delegate to build
    settings (``$(FLUTTER_BUILD_NAME)``, ``flutter.versionCode``) already
    follow the pubspec.
    """
    by_source = {r.source: r for r in local_results}
    targets = []
    for source in LOCAL_SOURCES:
        result = by_source.get(source)
        if result is None:
            continue
        if result.ok or (
            source is VersionSource.MANIFEST and result.error is not ErrorKind.SOURCE_MISSING
        ):
            targets.append(source)
        elif result.error is ErrorKind.UNRESOLVED_PLACEHOLDER:
            logger.debug(f"{source.label} delegates to build settings, not rewritten")
        elif result.error is ErrorKind.SOURCE_MISSING:
            logger.debug(f"{source.label} not present, skipped")
        else:
            logger.warning(f"⚠️  {source.label} not updated: {result.detail}")
    return targets


class ReconciliationEngine:
    """
    Reconciles one project's local versions with the published store versions.

    Args:
        project_root: Flutter project directory
        stores: Store to app identifier; stores mapped to None are reported
            as missing, stores absent from the mapping are not queried
        confirm: Called with the report in interactive mode; the
            recommendation is applied only if it returns True
    """

    def __init__(
        self,
        project_root: Path,
        stores: Optional[Dict[VersionSource, Optional[str]]] = None,
        extractor: Optional[VersionExtractor] = None,
        fetcher: Optional[StoreVersionFetcher] = None,
        writer: Optional[VersionWriter] = None,
        cache: Optional[StoreVersionCache] = None,
        confirm: Optional[Callable[[ReconciliationReport], bool]] = None,
        local_sources: Sequence[VersionSource] = LOCAL_SOURCES,
    ):
        self.project_root = Path(project_root)
        self.stores = dict(stores or {})
        self.extractor = extractor or VersionExtractor()
        self.cache = cache
        self.fetcher = fetcher or StoreVersionFetcher(cache=cache)
        self.writer = writer or VersionWriter(self.extractor)
        self.confirm = confirm
        self.local_sources = tuple(local_sources)

    def gather(self) -> Tuple[List[ExtractionResult], List[ExtractionResult]]:
        """Run all extractions and store lookups concurrently and wait for all of them."""
        stores = list(self.stores.items())
        task_count = len(self.local_sources) + len(stores)
        if task_count == 0:
            return [], []

        with ThreadPoolExecutor(max_workers=task_count) as pool:
            local_futures = [
                pool.submit(self.extractor.extract, source, self.project_root)
                for source in self.local_sources
            ]
            store_futures = [
                pool.submit(self.fetcher.fetch, store, identifier)
                for store, identifier in stores
            ]
            local_results = [f.result() for f in local_futures]
            store_results = [f.result() for f in store_futures]
        return local_results, store_results

    def current_version(self, local_results: Sequence[ExtractionResult]) -> VersionTuple:
        """
        The canonical project version, declared by the pubspec.

        Raises:
            ManifestError: If the pubspec is missing or has no valid version
        """
        for result in local_results:
            if result.source is VersionSource.MANIFEST:
                if result.ok:
                    return result.parsed
                raise ManifestError(
                    str(result.path or "pubspec.yaml"), result.detail or "no version"
                )
        raise ManifestError("pubspec.yaml", "not read")

    def run(self, mode: RunMode = RunMode.REPORT, apply_on_equal: bool = False) -> ReconciliationReport:
        """
        Build the reconciliation report and act on it according to *mode*.

        ``LOWER`` is applied in automated mode and, after confirmation, in
        interactive mode. ``EQUAL`` is applied the same way only when
        *apply_on_equal* is set. Report mode never writes.

        Raises:
            ManifestError: If the canonical version cannot be read
            WriteVerificationError: If applying the recommendation fails
        """
        mode = RunMode(mode)
        local_results, store_results = self.gather()
        current = self.current_version(local_results)
        report = ReconciliationReport(
            local_results=local_results,
            store_results=store_results,
            canonical=current,
        )

        store_versions = report.store_versions
        if not store_versions:
            if self.stores:
                logger.warning("⚠️  No versions found in any store, reporting local versions only")
            if self.cache is not None:
                report.cached_store = self.cache.read()
            return report

        report.highest_store = highest_of(store_versions)
        if self.cache is not None:
            self.cache.write(str(report.highest_store))

        report.classification = compare(current, report.highest_store)
        if report.classification is Comparison.HIGHER:
            logger.debug(f"{current} is ahead of the stores ({report.highest_store})")
            return report

        report.recommended = next_from_store(report.highest_store)
        should_apply = report.classification is Comparison.LOWER or apply_on_equal
        if not should_apply or mode is RunMode.REPORT:
            return report

        if mode is RunMode.INTERACTIVE:
            if self.confirm is None or not self.confirm(report):
                logger.info("❌ Version update cancelled")
                return report

        report.written = self.write_all(report.recommended, local_results)
        report.applied = True
        return report

    def write_all(
        self,
        version: VersionTuple,
        local_results: Optional[Sequence[ExtractionResult]] = None,
    ) -> List[VersionSource]:
        """
        Write *version* to every writable local source, one at a time.

        Raises:
            ManifestError: If the pubspec is missing
            WriteVerificationError: On the first failed write; ``succeeded``
                names the sources already rewritten
        """
        if local_results is None:
            local_results = self.extractor.extract_all(self.project_root, self.local_sources)
        for result in local_results:
            if result.source is VersionSource.MANIFEST and result.error is ErrorKind.SOURCE_MISSING:
                raise ManifestError(str(result.path or "pubspec.yaml"), "not found")

        written: List[VersionSource] = []
        for source in writable_sources(local_results):
            try:
                self.writer.write(version, source, self.project_root)
            except WriteVerificationError as e:
                raise e.with_succeeded(written)
            written.append(source)
        return written
