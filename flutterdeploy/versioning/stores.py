"""
Published version lookup for Google Play and the App Store.

Both lookups use public, unauthenticated endpoints: the Play Store listing
page (scraped) and the iTunes lookup API. Each lookup is a single request
bounded by a short timeout; any failure degrades to an ``ExtractionResult``
without a version and never interrupts the caller.
"""

import logging
import re
from typing import Callable, Dict, List, Optional

import requests
from bs4 import BeautifulSoup

from flutterdeploy import constants
from flutterdeploy.config import get_store_timeout, get_store_urls

from .cache import StoreVersionCache
from .exceptions import VersionFormatError
from .sources import ErrorKind, ExtractionResult, VersionSource
from .version import parse_store_version

logger = logging.getLogger(__name__)

_SEMVER = r"([0-9]+\.[0-9]+\.[0-9]+)"
_CURRENT_VERSION_LABEL = re.compile(r"current\s+version", re.IGNORECASE)
_CURRENT_VERSION_VALUE = re.compile(r"current\s+version\D*?" + _SEMVER, re.IGNORECASE)
_SEMVER_ANYWHERE = re.compile(_SEMVER)
_JSON_LD_VERSION = re.compile(r'"softwareVersion"\s*:\s*"([0-9]+\.[0-9]+(?:\.[0-9]+)?)"')
_QUOTED_SEMVER = re.compile(r'"' + _SEMVER + r'"')


def _from_current_version_label(soup: BeautifulSoup) -> Optional[str]:
    """Legacy listing layout: a "Current Version" label next to its value."""
    for label in soup.find_all(string=_CURRENT_VERSION_LABEL):
        parent = label.parent
        for container in (parent, parent.parent if parent is not None else None):
            if container is None:
                continue
            match = _CURRENT_VERSION_VALUE.search(container.get_text(" "))
            if match:
                return match.group(1)
    return None


def _from_itemprop(soup: BeautifulSoup) -> Optional[str]:
    for element in soup.find_all(attrs={"itemprop": "softwareVersion"}):
        text = element.get("content") or element.get_text(" ")
        match = _SEMVER_ANYWHERE.search(text or "")
        if match:
            return match.group(1)
    return None


def _from_json_ld(soup: BeautifulSoup) -> Optional[str]:
    for script in soup.find_all("script"):
        match = _JSON_LD_VERSION.search(script.get_text())
        if match:
            return match.group(1)
    return None


def _from_script_literal(soup: BeautifulSoup) -> Optional[str]:
    for script in soup.find_all("script"):
        match = _QUOTED_SEMVER.search(script.get_text())
        if match:
            return match.group(1)
    return None


# Candidate locations on the listing page, most specific first
PLAY_VERSION_LOCATORS: List[Callable[[BeautifulSoup], Optional[str]]] = [
    _from_current_version_label,
    _from_itemprop,
    _from_json_ld,
    _from_script_literal,
]


def find_play_version(html: str) -> Optional[str]:
    """Return the first version found in a Play Store listing page, or None."""
    soup = BeautifulSoup(html, "html.parser")
    for locate in PLAY_VERSION_LOCATORS:
        version = locate(soup)
        if version:
            logger.debug(f"Google Play version found by {locate.__name__}: {version}")
            return version
    return None


class StoreVersionFetcher:
    """Fetches the published version of an app from one store."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        urls: Optional[Dict[str, str]] = None,
        cache: Optional[StoreVersionCache] = None,
    ):
        self.timeout = timeout if timeout is not None else get_store_timeout()
        self.urls = urls or get_store_urls()
        self.cache = cache

    def fetch(self, store: VersionSource, identifier: Optional[str]) -> ExtractionResult:
        if not identifier:
            return ExtractionResult(
                store, error=ErrorKind.SOURCE_MISSING, detail="no app identifier configured"
            )
        if store is VersionSource.GOOGLE_PLAY:
            result = self.fetch_google_play(identifier)
        elif store is VersionSource.APP_STORE:
            result = self.fetch_app_store(identifier)
        else:
            raise ValueError(f"{store.label} is not a store")

        if result.ok:
            logger.info(f"✅ Found {store.label} version: {result.raw}")
            if self.cache is not None:
                self.cache.write(str(result.parsed), store)
        else:
            logger.warning(
                f"⚠️  Could not get {store.label} version for {identifier}: {result.detail}"
            )
        return result

    def _get(self, store: VersionSource, url: str, **kwargs):
        """Single GET; returns (response, None) or (None, failed result)."""
        try:
            response = requests.get(url, timeout=self.timeout, **kwargs)
        except requests.Timeout:
            return None, ExtractionResult(
                store,
                error=ErrorKind.NETWORK_UNAVAILABLE,
                detail=f"timed out after {self.timeout:g} seconds",
            )
        except requests.RequestException as e:  # includes ConnectionError
            return None, ExtractionResult(
                store, error=ErrorKind.NETWORK_UNAVAILABLE, detail=f"connection error: {e}"
            )
        if response.status_code != 200:
            return None, ExtractionResult(
                store,
                error=ErrorKind.NETWORK_UNAVAILABLE,
                detail=f"HTTP {response.status_code}",
            )
        return response, None

    def _parsed(self, store: VersionSource, raw: str) -> ExtractionResult:
        try:
            parsed = parse_store_version(raw)
        except VersionFormatError as e:
            return ExtractionResult(
                store, raw=raw, error=ErrorKind.REMOTE_PARSE_FAILURE, detail=str(e)
            )
        return ExtractionResult(store, raw=raw, parsed=parsed)

    def fetch_google_play(self, package_id: str) -> ExtractionResult:
        store = VersionSource.GOOGLE_PLAY
        logger.debug(f"🤖 Checking Google Play Store for {package_id}")
        response, failure = self._get(
            store,
            self.urls["google_play"],
            params={"id": package_id, "hl": "en"},
            headers={
                "User-Agent": constants.STORE_USER_AGENT,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.5",
            },
        )
        if failure is not None:
            return failure

        version = find_play_version(response.text)
        if version is None:
            return ExtractionResult(
                store,
                error=ErrorKind.REMOTE_PARSE_FAILURE,
                detail="no version found on the listing page",
            )
        return self._parsed(store, version)

    def fetch_app_store(self, bundle_id: str) -> ExtractionResult:
        store = VersionSource.APP_STORE
        logger.debug(f"🍎 Checking App Store for {bundle_id}")
        response, failure = self._get(
            store, self.urls["app_store"], params={"bundleId": bundle_id}
        )
        if failure is not None:
            return failure

        try:
            data = response.json()
        except ValueError:
            return ExtractionResult(
                store, error=ErrorKind.REMOTE_PARSE_FAILURE, detail="malformed JSON response"
            )

        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            return ExtractionResult(
                store, error=ErrorKind.REMOTE_PARSE_FAILURE, detail="app not found"
            )
        version = results[0].get("version") if isinstance(results[0], dict) else None
        if not version:
            return ExtractionResult(
                store,
                error=ErrorKind.REMOTE_PARSE_FAILURE,
                detail="lookup result has no version",
            )
        return self._parsed(store, str(version))
