"""Base class for filesystem resize strategies."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from volume_reconciler.cluster.models import PodIdentity

# Runs a shell command where the filesystem lives and returns its output
CommandExecutor = Callable[[str], str]


class FilesystemResizer(ABC):
    """Abstract base class for filesystem grow strategies.

    Strategies are stateless and selected by filesystem type.
    """

    @abstractmethod
    def can_resize_filesystem(self, fs_type: str) -> bool:
        """Return True if this strategy handles `fs_type`."""
        pass

    @abstractmethod
    def resize_filesystem(self, device: str, executor: CommandExecutor) -> None:
        """Grow the filesystem on `device` to fill the block device.

        Args:
            device: Block device holding the filesystem (e.g., /dev/xvdb)
            executor: Runs a shell command next to the device

        Raises:
            FilesystemResizeError: The resize failed or its output was not recognised
        """
        pass


class FilesystemBackend(ABC):
    """Grows the data filesystem a pod has mounted on a resized volume."""

    @abstractmethod
    def resize(self, pod: "PodIdentity") -> None:
        """Grow the data filesystem of `pod`.

        Raises:
            FilesystemResizeError: The filesystem could not be grown
        """
        pass
