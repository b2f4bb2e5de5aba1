"""
Data model for claims, volumes and the desired volume specification.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from volume_reconciler.cluster.quantity import quantity_to_gigabytes

PROVISIONED_BY_ANNOTATION = "pv.kubernetes.io/provisioned-by"
STORAGE_PROVISIONER_ANNOTATION = "volume.beta.kubernetes.io/storage-provisioner"


@dataclass(frozen=True)
class ClaimReference:
    """Namespace and name of the claim a volume is bound to."""

    namespace: str
    name: str


@dataclass(frozen=True)
class PodIdentity:
    """Namespace and name of the pod that mounts a volume."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass
class VolumeClaim:
    """A namespaced storage request bound to one replica slot.

    Attributes:
        name: Claim name, ending in the replica ordinal (e.g., "pgdata-mycluster-0")
        namespace: Claim namespace
        volume_name: Name of the bound volume (empty while unbound)
        labels: Claim labels, including the owning cluster's selector labels
        annotations: Claim annotations
    """

    name: str
    namespace: str
    volume_name: str = ""
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)

    @property
    def provisioner(self) -> Optional[str]:
        return self.annotations.get(STORAGE_PROVISIONER_ANNOTATION)


@dataclass
class Volume:
    """The physical storage unit backing a claim.

    Attributes:
        name: Volume name
        capacity: Recorded capacity as a quantity string (e.g., "10Gi")
        claim_ref: Back-reference to the bound claim
        annotations: Volume annotations
        source: Provider-specific volume source, keyed by source type
            (e.g., {"awsElasticBlockStore": {"volumeID": "aws://eu-central-1b/vol-0abc"}})
    """

    name: str
    capacity: str
    claim_ref: Optional[ClaimReference] = None
    annotations: Dict[str, str] = field(default_factory=dict)
    source: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @property
    def size_gb(self) -> int:
        return quantity_to_gigabytes(self.capacity)

    @property
    def provisioned_by(self) -> Optional[str]:
        return self.annotations.get(PROVISIONED_BY_ANNOTATION)


class ManifestVolumeSpec(BaseModel):
    """Desired volume state declared in the cluster manifest."""

    size: str = Field(..., description="Volume size quantity (e.g., 10Gi)", min_length=1)
    storage_class: Optional[str] = Field(None, description="Storage class name (informational)")

    @field_validator("size")
    def strip_size(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Volume size cannot be blank")
        return v

    @property
    def size_gb(self) -> int:
        """Desired size in whole gigabytes; raises InvalidSizeSpec if unparseable."""
        return quantity_to_gigabytes(self.size)


@dataclass
class ClusterContext:
    """Explicit description of the cluster a reconciliation pass works on.

    Attributes:
        name: Cluster name
        namespace: Namespace holding the cluster's claims and pods
        labels: Label selector identifying the cluster's claims
        replicas: Number of currently running replicas
        logger: Logger used for this cluster's reconciliation
    """

    name: str
    namespace: str
    labels: Dict[str, str]
    replicas: int
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("volume_reconciler.cluster"))
