"""Volume resize reconciliation engine.

This package enumerates a cluster's volumes, matches them to resize backends
and grows block devices and filesystems to the manifest size.
"""

from .coordinator import ResizeCoordinator
from .enumerator import VolumeEnumerator
from .models import ClaimReference, ClusterContext, ManifestVolumeSpec, PodIdentity, Volume, VolumeClaim
from .store import KubernetesVolumeStore, VolumeStore

__all__ = [
    "ClaimReference",
    "ClusterContext",
    "KubernetesVolumeStore",
    "ManifestVolumeSpec",
    "PodIdentity",
    "ResizeCoordinator",
    "Volume",
    "VolumeClaim",
    "VolumeEnumerator",
    "VolumeStore",
]
