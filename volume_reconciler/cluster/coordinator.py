"""
Grow-only reconciliation of a cluster's volume sizes.

A batch is checked as a whole before anything is touched: no volume may be
larger than the manifest size and every volume that must grow needs exactly
one backend. The volumes are then grown one at a time: the owning backend
grows the block device, the filesystem inside the pod is grown to match, and
the new capacity is recorded in the store before moving to the next volume.
A failure from then on stops the batch; volumes finished before it keep
their new size.
"""

from typing import List, Optional, Sequence, Tuple

from volume_reconciler.cluster.connections import ProviderConnectionManager
from volume_reconciler.cluster.enumerator import VolumeEnumerator
from volume_reconciler.cluster.exceptions import (
    AmbiguousProvider,
    BlockResizeError,
    FilesystemResizeError,
    NoCompatibleProvider,
    ProviderConnectionError,
    ShrinkNotSupported,
    StoreAccessError,
    VolumeReconcilerException,
)
from volume_reconciler.cluster.models import ClusterContext, ManifestVolumeSpec, Volume
from volume_reconciler.cluster.naming import DEFAULT_DATA_VOLUME_NAME, pod_identity_from_volume
from volume_reconciler.cluster.store import VolumeStore
from volume_reconciler.filesystems.base import FilesystemBackend
from volume_reconciler.providers.base import VolumeResizer


def _error_message(e: Exception) -> str:
    return e.message if isinstance(e, VolumeReconcilerException) else str(e)


class ResizeCoordinator:
    """Resizes a cluster's volumes to the size declared in its manifest."""

    def __init__(
        self,
        context: ClusterContext,
        store: VolumeStore,
        filesystem_resizer: FilesystemBackend,
        data_volume_name: str = DEFAULT_DATA_VOLUME_NAME,
    ):
        self.context = context
        self.store = store
        self.filesystem_resizer = filesystem_resizer
        self.data_volume_name = data_volume_name
        self.enumerator = VolumeEnumerator(context, store)
        self.logger = context.logger

    def needs_resize(self, desired: ManifestVolumeSpec) -> bool:
        """
        Return True if any eligible volume differs from the manifest size.

        Nothing is modified.

        Raises:
            InvalidSizeSpec: The manifest size cannot be parsed
            StoreAccessError: Volumes could not be listed
            MalformedIdentifier: A claim name carries a non-numeric ordinal
        """
        target = desired.size_gb
        for volume in self.enumerator.list_eligible_volumes():
            if volume.size_gb != target:
                return True
        return False

    def resize(self, desired: ManifestVolumeSpec, resizers: Sequence[VolumeResizer]) -> None:
        """
        Grow every eligible volume to the manifest size.

        Args:
            desired: Desired volume specification
            resizers: Resize backends, at most one of which may claim each volume

        Raises:
            InvalidSizeSpec: The manifest size cannot be parsed (nothing is touched)
            ShrinkNotSupported: A volume is larger than the manifest size (nothing is touched)
            AmbiguousProvider: More than one backend claims a volume
            NoCompatibleProvider: A volume that needs resizing is claimed by no backend
                (nothing is touched)
            ProviderConnectionError: Connecting or resolving a provider volume ID failed
            BlockResizeError: The backend failed to grow a volume
            FilesystemResizeError: The filesystem could not be grown
            StoreAccessError: Listing volumes or recording the new capacity failed
        """
        target = desired.size_gb
        volumes = self.enumerator.list_eligible_volumes()
        plan = self._plan(volumes, target, resizers)

        with ProviderConnectionManager(self.logger) as connections:
            for volume, resizer in plan:
                connections.ensure_connected(resizer)
                self._resize_volume(volume, resizer, desired.size, target)

    def _plan(
        self, volumes: List[Volume], target: int, resizers: Sequence[VolumeResizer]
    ) -> List[Tuple[Volume, VolumeResizer]]:
        """Pair every volume that must grow with its backend, touching nothing."""
        for volume in volumes:
            current = volume.size_gb
            if current > target:
                raise ShrinkNotSupported(
                    f"Cannot shrink persistent volume {volume.name} from {current} GB to {target} GB",
                    volume_name=volume.name,
                    current_gb=current,
                    target_gb=target,
                )

        plan: List[Tuple[Volume, VolumeResizer]] = []
        unmanaged: List[str] = []
        for volume in volumes:
            if volume.size_gb == target:
                continue
            resizer = self._select_resizer(volume, resizers)
            if resizer is None:
                unmanaged.append(volume.name)
            else:
                plan.append((volume, resizer))

        if unmanaged and not plan:
            raise NoCompatibleProvider(
                "Could not resize volumes: persistent volumes are not compatible with existing resizing providers"
            )
        if unmanaged:
            raise NoCompatibleProvider(
                f"Could not resize volumes: no resizing provider manages persistent volumes {', '.join(unmanaged)}"
            )
        return plan

    def _select_resizer(self, volume: Volume, resizers: Sequence[VolumeResizer]) -> Optional[VolumeResizer]:
        matches: List[VolumeResizer] = [r for r in resizers if r.volume_belongs_to_provider(volume)]
        if len(matches) > 1:
            names = ", ".join(r.name for r in matches)
            raise AmbiguousProvider(f"Persistent volume {volume.name} is claimed by several providers: {names}")
        return matches[0] if matches else None

    def _resize_volume(self, volume: Volume, resizer: VolumeResizer, capacity: str, target: int) -> None:
        try:
            volume_id = resizer.get_provider_volume_id(volume)
        except Exception as e:
            raise ProviderConnectionError(
                f"Could not get {resizer.name} volume id for persistent volume {volume.name}: {_error_message(e)}"
            ) from e

        self.logger.debug("updating persistent volume %r to %d", volume.name, target)
        try:
            resizer.resize_volume(volume_id, target)
        except Exception as e:
            raise BlockResizeError(
                f"Could not resize {resizer.name} volume {volume_id!r}: {_error_message(e)}"
            ) from e

        self.logger.debug("resizing the filesystem on the volume %r", volume.name)
        try:
            pod = pod_identity_from_volume(volume, self.data_volume_name)
        except ValueError as e:
            raise FilesystemResizeError(f"Could not find the pod of persistent volume {volume.name}: {e}") from e
        try:
            self.filesystem_resizer.resize(pod)
        except Exception as e:
            raise FilesystemResizeError(
                f"Could not resize the filesystem on pod {pod.name!r}: {_error_message(e)}"
            ) from e
        self.logger.debug("filesystem resize successful on volume %r", volume.name)

        self.logger.debug("updating persistent volume definition for volume %r", volume.name)
        try:
            self.store.update_volume_capacity(volume, capacity)
        except StoreAccessError as e:
            raise StoreAccessError(
                f"Volume {volume.name} was resized to {target} GB but its capacity could not be recorded: {e.message}"
            ) from e
        self.logger.debug("successfully updated persistent volume %r", volume.name)
