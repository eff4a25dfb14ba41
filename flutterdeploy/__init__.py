"""Version reconciliation and release tagging for Flutter app deployments."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("flutter-deploy-kit")
except PackageNotFoundError:
    __version__ = "0.0.0"  # Fallback version for development
