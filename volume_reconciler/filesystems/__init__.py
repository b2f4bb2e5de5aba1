"""Filesystem resize strategies.

- FilesystemBackend: grows the data filesystem of a pod
- FilesystemResizer: strategy interface selected by filesystem type
- Ext234Resize: ext2/ext3/ext4 strategy using resize2fs
- PodFilesystemResizer: runs a strategy inside a database pod
"""

from .base import CommandExecutor, FilesystemBackend, FilesystemResizer
from .ext234 import Ext234Resize
from .pod import PodFilesystemResizer

__all__ = ["CommandExecutor", "FilesystemBackend", "FilesystemResizer", "Ext234Resize", "PodFilesystemResizer"]
