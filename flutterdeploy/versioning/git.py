"""
Git integration for live deployment tags.

Tags are created locally on HEAD and optionally pushed to ``origin``, where
the CI pipeline picks them up and starts a store release.
"""

import logging
from pathlib import Path
from typing import Optional

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from .exceptions import TagError

logger = logging.getLogger(__name__)


class GitTagSink:
    """
    Creates and pushes tags in the git repository containing a project.

    Args:
        project_root: Any directory inside the repository
        remote: Remote that tags are pushed to
    """

    def __init__(self, project_root: Path, remote: str = "origin"):
        self.project_root = Path(project_root)
        self.remote = remote
        self._repo: Optional[Repo] = None

    @property
    def repo(self) -> Repo:
        if self._repo is None:
            try:
                self._repo = Repo(self.project_root, search_parent_directories=True)
            except (InvalidGitRepositoryError, NoSuchPathError):
                raise TagError("", f"{self.project_root} is not inside a git repository")
        return self._repo

    def exists(self, tag: str) -> bool:
        return tag in [t.name for t in self.repo.tags]

    def create(self, tag: str, message: Optional[str] = None) -> bool:
        """
        Create *tag* on HEAD unless it already exists.

        Returns:
            True if the tag was created, False if it was already present

        Raises:
            TagError: If git refuses to create the tag
        """
        if self.exists(tag):
            logger.info(f"ℹ️  Tag {tag} already exists")
            return False
        try:
            if message:
                self.repo.create_tag(tag, message=message)
            else:
                self.repo.create_tag(tag)
        except (GitCommandError, ValueError) as e:
            raise TagError(tag, str(e))
        logger.info(f"🏷️  Created tag {tag}")
        return True

    def push(self, tag: str) -> None:
        """
        Push *tag* to the configured remote.

        Raises:
            TagError: If the remote is missing or the push fails
        """
        try:
            remote = self.repo.remote(self.remote)
        except ValueError:
            raise TagError(tag, f"remote '{self.remote}' not configured")
        try:
            infos = remote.push(tag)
        except GitCommandError as e:
            raise TagError(tag, f"push to {self.remote} failed: {e}")
        for info in infos or []:
            if info.flags & info.ERROR:
                raise TagError(tag, f"push to {self.remote} rejected: {info.summary.strip()}")
        logger.info(f"🚀 Pushed tag {tag} to {self.remote}")
