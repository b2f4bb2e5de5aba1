"""
Filesystem resize inside a running database pod.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from kubernetes import client
from kubernetes.client.rest import ApiException
from kubernetes.stream import stream

from volume_reconciler.cluster.exceptions import FilesystemResizeError
from volume_reconciler.cluster.models import PodIdentity
from volume_reconciler.filesystems.base import FilesystemBackend, FilesystemResizer
from volume_reconciler.filesystems.ext234 import Ext234Resize

logger = logging.getLogger(__name__)

DEFAULT_CONTAINER_NAME = "postgres"
DEFAULT_DATA_MOUNT = "/home/postgres/pgdata"
EXEC_TIMEOUT = 60


class PodFilesystemResizer(FilesystemBackend):
    """Grows the data filesystem of a pod using the matching strategy.

    The device and filesystem type are discovered with `df -T` on the data
    mount; the first strategy accepting that type performs the resize.
    """

    def __init__(
        self,
        core_api: client.CoreV1Api,
        strategies: Optional[Sequence[FilesystemResizer]] = None,
        container: str = DEFAULT_CONTAINER_NAME,
        data_mount: str = DEFAULT_DATA_MOUNT,
    ):
        self.core_api = core_api
        self.strategies: List[FilesystemResizer] = list(strategies) if strategies is not None else [Ext234Resize()]
        self.container = container
        self.data_mount = data_mount

    def resize(self, pod: PodIdentity) -> None:
        """
        Grow the data filesystem mounted in `pod`.

        Raises:
            FilesystemResizeError: Discovery or resize failed, or no strategy
                supports the filesystem type
        """
        device, fs_type = self.get_filesystem_info(pod)
        for strategy in self.strategies:
            if not strategy.can_resize_filesystem(fs_type):
                continue
            logger.debug("resizing %s filesystem on %s in pod %s", fs_type, device, pod)
            strategy.resize_filesystem(device, lambda command: self.exec_command(pod, command))
            return
        raise FilesystemResizeError(
            f"Could not resize filesystem: no compatible resizers for the filesystem of type {fs_type!r}"
        )

    def get_filesystem_info(self, pod: PodIdentity) -> Tuple[str, str]:
        """Return the (device, filesystem type) backing the data mount."""
        output = self.exec_command(pod, f"df -T {self.data_mount} | tail -1")
        fields = output.split()
        if len(fields) < 2:
            raise FilesystemResizeError(f"Too few fields in the df output for pod {pod}: {output.strip()!r}")
        return fields[0], fields[1]

    def exec_command(self, pod: PodIdentity, command: str) -> str:
        """
        Run `command` through bash in the pod's database container.

        Returns:
            Command standard output

        Raises:
            FilesystemResizeError: The exec failed, the command wrote to
                stderr or exited non-zero
        """
        try:
            response = stream(
                self.core_api.connect_get_namespaced_pod_exec,
                pod.name,
                pod.namespace,
                container=self.container,
                command=["bash", "-c", command],
                stderr=True,
                stdin=False,
                stdout=True,
                tty=False,
                _preload_content=False,
            )
        except ApiException as e:
            raise FilesystemResizeError(f"Could not execute command in pod {pod}: {e}") from e

        try:
            response.run_forever(timeout=EXEC_TIMEOUT)
            if response.is_open():
                raise FilesystemResizeError(
                    f"Command {command!r} in pod {pod} did not finish within {EXEC_TIMEOUT}s"
                )
            stdout = response.read_stdout() or ""
            stderr = response.read_stderr() or ""
            returncode = response.returncode
        finally:
            response.close()

        if stderr:
            raise FilesystemResizeError(f"Command {command!r} in pod {pod} failed: {stderr.strip()}")
        if returncode:
            raise FilesystemResizeError(f"Command {command!r} in pod {pod} exited with code {returncode}")
        return stdout
