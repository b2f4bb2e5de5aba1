"""Exceptions raised by the volume resize reconciliation engine."""


class VolumeReconcilerException(Exception):
    """Base exception for volume reconciliation errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class StoreAccessError(VolumeReconcilerException):
    """Listing, reading, updating or deleting a store record failed."""

    pass


class MalformedIdentifier(VolumeReconcilerException):
    """A claim name carries an ordinal suffix that is not a number."""

    def __init__(self, message: str, name: str = None):
        super().__init__(message)
        self.name = name


class InvalidSizeSpec(VolumeReconcilerException):
    """The manifest volume size could not be parsed."""

    pass


class ShrinkNotSupported(VolumeReconcilerException):
    """The desired size is smaller than a volume's current size."""

    def __init__(self, message: str, volume_name: str = None, current_gb: int = None, target_gb: int = None):
        super().__init__(message)
        self.volume_name = volume_name
        self.current_gb = current_gb
        self.target_gb = target_gb


class ProviderConnectionError(VolumeReconcilerException):
    """Connecting to a provider or resolving its volume ID failed."""

    pass


class BlockResizeError(VolumeReconcilerException):
    """The provider failed to grow the block device."""

    pass


class FilesystemResizeError(VolumeReconcilerException):
    """Growing the filesystem inside the pod failed."""

    pass


class NoCompatibleProvider(VolumeReconcilerException):
    """Volumes need resizing but no resize backend manages them."""

    pass


class AmbiguousProvider(NoCompatibleProvider):
    """More than one resize backend claims the same volume."""

    pass
