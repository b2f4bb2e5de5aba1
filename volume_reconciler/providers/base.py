"""Base class for block-storage resize backends."""

from abc import ABC, abstractmethod

from volume_reconciler.cluster.models import Volume


class VolumeResizer(ABC):
    """Abstract base class for cloud block-storage resize backends.

    A resizer owns at most one provider connection. Ownership of a volume is
    decided by `volume_belongs_to_provider`; several resizers may be supplied
    together and each volume must be claimed by exactly one of them.
    """

    name = "abstract"

    @abstractmethod
    def volume_belongs_to_provider(self, volume: Volume) -> bool:
        """Return True if this backend manages `volume`."""
        pass

    @abstractmethod
    def is_connected_to_provider(self) -> bool:
        """Return True while a provider connection is open."""
        pass

    @abstractmethod
    def connect_to_provider(self) -> None:
        """Open the provider connection.

        Raises:
            ProviderConnectionError: Connection failed
        """
        pass

    @abstractmethod
    def disconnect_from_provider(self) -> None:
        """Release the provider connection.

        Raises:
            ProviderConnectionError: Disconnection failed
        """
        pass

    @abstractmethod
    def get_provider_volume_id(self, volume: Volume) -> str:
        """Resolve the provider-native ID of `volume`.

        Raises:
            ProviderConnectionError: The ID cannot be derived from the volume
        """
        pass

    @abstractmethod
    def resize_volume(self, volume_id: str, new_size_gb: int) -> None:
        """Grow the provider volume to `new_size_gb` gigabytes.

        Raises:
            BlockResizeError: The provider rejected or failed the resize
        """
        pass
