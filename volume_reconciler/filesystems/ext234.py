"""
ext2/ext3/ext4 filesystem resize strategy.
"""

from volume_reconciler.cluster.exceptions import FilesystemResizeError
from volume_reconciler.filesystems.base import CommandExecutor, FilesystemResizer

EXT_FILESYSTEMS = ("ext2", "ext3", "ext4")
RESIZE2FS = "resize2fs"


class Ext234Resize(FilesystemResizer):
    """Grows ext2/3/4 filesystems online with resize2fs."""

    def can_resize_filesystem(self, fs_type: str) -> bool:
        return fs_type in EXT_FILESYSTEMS

    def resize_filesystem(self, device: str, executor: CommandExecutor) -> None:
        # resize2fs reports progress on stderr
        output = executor(f"{RESIZE2FS} {device} 2>&1")

        if "Nothing to do" in output:
            return
        if "on-line resizing required" in output and "is now" in output:
            return
        raise FilesystemResizeError(f"Unrecognized {RESIZE2FS} output, assuming error: {output.strip()}")
