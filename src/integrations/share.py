"""Share targets that hand exported report files to the outside world."""

import abc
import logging
import shutil
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class ShareTarget(abc.ABC):
    """A platform surface that can receive an exported artifact."""

    @abc.abstractmethod
    def is_available(self) -> bool:
        """Whether the host supports sharing through this target."""

    @abc.abstractmethod
    def share(self, path: Path) -> str:
        """Share *path*; return where it ended up."""


class DirectoryShareTarget(ShareTarget):
    """Copies artifacts into a shared outbox directory (e.g. a synced folder)."""

    def __init__(self, share_dir: Optional[Path]) -> None:
        self._share_dir = Path(share_dir) if share_dir else None

    def is_available(self) -> bool:
        return self._share_dir is not None

    def share(self, path: Path) -> str:
        if self._share_dir is None:
            raise RuntimeError("No share directory configured")
        self._share_dir.mkdir(parents=True, exist_ok=True)
        destination = self._share_dir / path.name
        shutil.copy2(path, destination)
        logger.info("Shared %s -> %s", path, destination)
        return str(destination)
