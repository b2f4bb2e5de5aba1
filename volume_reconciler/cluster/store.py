"""
Query/update surface over the resource store holding claims and volumes.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from volume_reconciler.cluster.exceptions import StoreAccessError
from volume_reconciler.cluster.models import ClaimReference, Volume, VolumeClaim

# Volume spec fields that are not a provider volume source
_NON_SOURCE_SPEC_FIELDS = {"capacity", "claimRef", "nodeAffinity"}


class VolumeStore(ABC):
    """Abstract store of volume claims and volumes."""

    @abstractmethod
    def list_claims(self, labels: Dict[str, str], namespace: str) -> List[VolumeClaim]:
        """List claims in `namespace` carrying all of `labels`.

        Raises:
            StoreAccessError: Listing failed
        """
        pass

    @abstractmethod
    def get_volume(self, name: str) -> Volume:
        """Fetch a volume by name.

        Raises:
            StoreAccessError: The volume could not be read
        """
        pass

    @abstractmethod
    def update_volume_capacity(self, volume: Volume, capacity: str) -> Volume:
        """Record a new capacity for `volume`.

        Returns:
            The volume with its capacity updated

        Raises:
            StoreAccessError: The update failed
        """
        pass

    @abstractmethod
    def delete_claim(self, namespace: str, name: str) -> None:
        """Delete a claim.

        Raises:
            StoreAccessError: The deletion failed
        """
        pass


def format_label_selector(labels: Dict[str, str]) -> str:
    """Render a label mapping as a `k=v,...` selector."""
    return ",".join(f"{key}={value}" for key, value in sorted(labels.items()))


class KubernetesVolumeStore(VolumeStore):
    """VolumeStore backed by PersistentVolumeClaims and PersistentVolumes."""

    def __init__(self, core_api: client.CoreV1Api):
        self.core_api = core_api
        self._serializer = client.ApiClient()

    @classmethod
    def from_config(cls, kubeconfig: Optional[str] = None) -> "KubernetesVolumeStore":
        """Build a store from in-cluster config, falling back to a kubeconfig file."""
        load_kube_config(kubeconfig)
        return cls(client.CoreV1Api())

    def list_claims(self, labels: Dict[str, str], namespace: str) -> List[VolumeClaim]:
        try:
            response = self.core_api.list_namespaced_persistent_volume_claim(
                namespace=namespace,
                label_selector=format_label_selector(labels),
            )
        except ApiException as e:
            raise StoreAccessError(f"Could not list persistent volume claims in {namespace}: {e}") from e
        return [self._to_claim(item) for item in response.items]

    def get_volume(self, name: str) -> Volume:
        try:
            pv = self.core_api.read_persistent_volume(name=name)
        except ApiException as e:
            raise StoreAccessError(f"Could not get persistent volume {name}: {e}") from e
        return self._to_volume(pv)

    def update_volume_capacity(self, volume: Volume, capacity: str) -> Volume:
        body = {"spec": {"capacity": {"storage": capacity}}}
        try:
            self.core_api.patch_persistent_volume(name=volume.name, body=body)
        except ApiException as e:
            raise StoreAccessError(f"Could not update persistent volume {volume.name}: {e}") from e
        volume.capacity = capacity
        return volume

    def delete_claim(self, namespace: str, name: str) -> None:
        try:
            self.core_api.delete_namespaced_persistent_volume_claim(name=name, namespace=namespace)
        except ApiException as e:
            raise StoreAccessError(f"Could not delete persistent volume claim {namespace}/{name}: {e}") from e

    def _to_claim(self, pvc: Any) -> VolumeClaim:
        metadata = pvc.metadata
        return VolumeClaim(
            name=metadata.name,
            namespace=metadata.namespace,
            volume_name=(pvc.spec.volume_name or "") if pvc.spec else "",
            labels=dict(metadata.labels or {}),
            annotations=dict(metadata.annotations or {}),
        )

    def _to_volume(self, pv: Any) -> Volume:
        spec = self._serializer.sanitize_for_serialization(pv.spec) or {}
        claim_ref = None
        if spec.get("claimRef"):
            claim_ref = ClaimReference(
                namespace=spec["claimRef"].get("namespace", ""),
                name=spec["claimRef"].get("name", ""),
            )
        source = {
            key: value
            for key, value in spec.items()
            if key not in _NON_SOURCE_SPEC_FIELDS and isinstance(value, dict)
        }
        return Volume(
            name=pv.metadata.name,
            capacity=str((spec.get("capacity") or {}).get("storage", "0")),
            claim_ref=claim_ref,
            annotations=dict(pv.metadata.annotations or {}),
            source=source,
        )


def load_kube_config(kubeconfig: Optional[str] = None) -> None:
    """Load Kubernetes client configuration.

    An explicit kubeconfig path wins; otherwise in-cluster config is tried
    first, then the default kubeconfig location.
    """
    if kubeconfig:
        config.load_kube_config(config_file=kubeconfig)
        return
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()
