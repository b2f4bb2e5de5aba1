"""
Naming conventions linking claims, volumes and pods.

Claims created by the cluster's workload controller are named
`<data volume name>-<pod name>`, and pod names end in the replica ordinal
(e.g., claim "pgdata-mycluster-0" belongs to pod "mycluster-0").
"""

from typing import Optional

from volume_reconciler.cluster.exceptions import MalformedIdentifier
from volume_reconciler.cluster.models import PodIdentity, Volume

DEFAULT_DATA_VOLUME_NAME = "pgdata"


def claim_ordinal(claim_name: str) -> Optional[int]:
    """
    Parse the replica ordinal from the last `-`-delimited token of a claim name.

    Names without a usable suffix (no dash after the first character, or a
    trailing dash) carry no ordinal and yield None.

    Args:
        claim_name: Claim name (e.g., "pgdata-mycluster-2")

    Returns:
        The ordinal, or None if the name carries no ordinal suffix

    Raises:
        MalformedIdentifier: If the last token is not an integer
    """
    last_dash = claim_name.rfind("-")
    if last_dash <= 0 or last_dash == len(claim_name) - 1:
        return None

    suffix = claim_name[last_dash + 1:]
    if not (suffix.isascii() and suffix.isdigit()):
        raise MalformedIdentifier(
            f"Could not convert last part of the volume claim name {claim_name!r} to a number",
            name=claim_name,
        )
    return int(suffix)


def is_running_ordinal(claim_name: str, replicas: int) -> bool:
    """Return True if the claim belongs to a replica slot below `replicas`."""
    ordinal = claim_ordinal(claim_name)
    if ordinal is None:
        return True
    return ordinal <= replicas - 1


def pod_name_from_claim_name(claim_name: str, data_volume_name: str = DEFAULT_DATA_VOLUME_NAME) -> str:
    """
    Strip the `<data volume name>-` prefix from a claim name.

    Raises:
        ValueError: If the claim name does not carry the prefix
    """
    prefix = f"{data_volume_name}-"
    if not claim_name.startswith(prefix) or len(claim_name) == len(prefix):
        raise ValueError(f"Claim name {claim_name!r} does not start with {prefix!r}")
    return claim_name[len(prefix):]


def pod_identity_from_volume(volume: Volume, data_volume_name: str = DEFAULT_DATA_VOLUME_NAME) -> PodIdentity:
    """
    Recover the pod that mounts a volume from the volume's claim back-reference.

    Raises:
        ValueError: If the volume is not bound or its claim name lacks the prefix
    """
    if volume.claim_ref is None:
        raise ValueError(f"Volume {volume.name} is not bound to a claim")
    name = pod_name_from_claim_name(volume.claim_ref.name, data_volume_name)
    return PodIdentity(namespace=volume.claim_ref.namespace, name=name)
