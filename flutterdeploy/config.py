"""Configuration: user-level settings file and the per-project ``project.config``."""

import configparser
import logging
import os
import platform
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from flutterdeploy import constants

APP_NAME = "flutterdeploy"

logger = logging.getLogger(__name__)

_home = os.path.expanduser("~")

xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(_home, ".config")

default_cfg = {
    "stores": {
        "timeout": str(constants.STORE_REQUEST_TIMEOUT),
        "google_play_url": constants.GOOGLE_PLAY_URL,
        "app_store_url": constants.APP_STORE_LOOKUP_URL,
    },
    "cache": {"dir": tempfile.gettempdir()},
}

if platform.system() == "Darwin":
    # macOS
    config_dir = Path("~/Library/Application Support/flutterdeploy").expanduser()
else:
    # Linux or others
    config_dir = Path(os.path.join(xdg_config_home, APP_NAME))


def get_config_file():
    return config_dir / f"{APP_NAME}.cfg"


class ConfigAccessor:
    """
    A dict-like accessor for the user configuration file.

    Missing files, sections and keys are not errors; callers pass a default.

    Usage:
        config = ConfigAccessor()
        value = config.get('stores', 'timeout', default='10')
    """

    def __init__(self, config_path: Optional[Path] = None):
        if config_path is None:
            self.config_path = get_config_file()
        else:
            self.config_path = Path(config_path)

        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            self.config.read(self.config_path)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from the specified section and key.

        Args:
            section: The configuration section
            key: The configuration key
            default: Value to return if the section or key doesn't exist

        Returns:
            The configuration value if it exists, otherwise the default value
        """
        try:
            return self.config[section][key]
        except (KeyError, configparser.NoSectionError, configparser.NoOptionError):
            return default


# Create a global config accessor instance
config = ConfigAccessor()


def get_store_timeout(accessor: Optional[ConfigAccessor] = None) -> float:
    """Timeout in seconds for a single store request."""
    accessor = accessor or config
    raw = accessor.get("stores", "timeout", default_cfg["stores"]["timeout"])
    try:
        timeout = float(raw)
    except (TypeError, ValueError):
        logger.warning(
            f"Ignoring invalid store timeout '{raw}', "
            f"using {constants.STORE_REQUEST_TIMEOUT}s"
        )
        return float(constants.STORE_REQUEST_TIMEOUT)
    if timeout <= 0:
        return float(constants.STORE_REQUEST_TIMEOUT)
    return timeout


def get_store_urls(accessor: Optional[ConfigAccessor] = None) -> Dict[str, str]:
    accessor = accessor or config
    return {
        "google_play": accessor.get(
            "stores", "google_play_url", default_cfg["stores"]["google_play_url"]
        ),
        "app_store": accessor.get(
            "stores", "app_store_url", default_cfg["stores"]["app_store_url"]
        ),
    }


def get_cache_dir(accessor: Optional[ConfigAccessor] = None) -> Path:
    """Directory holding the advisory store version cache files."""
    accessor = accessor or config
    cache_dir = accessor.get("cache", "dir", default_cfg["cache"]["dir"])
    return Path(cache_dir).expanduser()


_CONFIG_LINE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*?)\s*$")


class ProjectConfig(BaseModel):
    """Values read from a project's ``project.config`` file.

    The file is a list of ``KEY="value"`` lines as written by the setup
    scripts. Unknown keys are kept as extra fields.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    package_name: Optional[str] = Field(None, alias="PACKAGE_NAME")
    bundle_id: Optional[str] = Field(None, alias="BUNDLE_ID")
    version_strategy: str = Field("auto", alias="VERSION_STRATEGY")

    @field_validator("package_name", "bundle_id")
    @classmethod
    def empty_as_missing(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("version_strategy")
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        v = (v or "auto").strip().lower()
        if v not in ("auto", "manual"):
            raise ValueError("VERSION_STRATEGY must be 'auto' or 'manual'")
        return v

    @classmethod
    def parse(cls, text: str) -> "ProjectConfig":
        values: Dict[str, str] = {}
        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            match = _CONFIG_LINE.match(line)
            if not match:
                continue
            key, value = match.groups()
            values[key] = value.strip("\"'")
        return cls(**values)

    @classmethod
    def load(cls, project_root: Path) -> "ProjectConfig":
        """Load ``project.config`` from *project_root*; empty config if absent."""
        path = Path(project_root) / constants.PROJECT_CONFIG_FILE
        if not path.exists():
            return cls()
        try:
            return cls.parse(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable {path}: {e}")
            return cls()
