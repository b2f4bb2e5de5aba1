"""
Enumeration of the volumes belonging to a cluster's running replicas.
"""

from typing import List

from volume_reconciler.cluster.exceptions import StoreAccessError
from volume_reconciler.cluster.models import ClusterContext, Volume, VolumeClaim
from volume_reconciler.cluster.naming import claim_ordinal
from volume_reconciler.cluster.store import VolumeStore


class VolumeEnumerator:
    """Resolves the authoritative set of volumes for a cluster."""

    def __init__(self, context: ClusterContext, store: VolumeStore):
        self.context = context
        self.store = store
        self.logger = context.logger

    def list_claims(self) -> List[VolumeClaim]:
        """List every claim carrying the cluster's labels."""
        try:
            return self.store.list_claims(self.context.labels, self.context.namespace)
        except StoreAccessError as e:
            raise StoreAccessError(f"Could not list cluster's persistent volume claims: {e.message}") from e

    def list_eligible_volumes(self) -> List[Volume]:
        """
        List the volumes bound to claims of currently running replicas.

        Claims whose ordinal is beyond the last running replica are skipped;
        their volumes may not exist yet and must not be touched.

        Returns:
            Volumes in claim order (possibly empty)

        Raises:
            StoreAccessError: Listing claims or reading any volume failed
            MalformedIdentifier: A claim's ordinal suffix is not a number
        """
        last_pod_index = self.context.replicas - 1
        volumes: List[Volume] = []

        for claim in self.list_claims():
            ordinal = claim_ordinal(claim.name)
            if ordinal is not None and ordinal > last_pod_index:
                self.logger.debug("skipping persistent volume %r corresponding to a non-running pod", claim.name)
                continue

            if not claim.volume_name:
                raise StoreAccessError(f"Persistent volume claim {claim.name!r} is not bound to a volume")
            try:
                volume = self.store.get_volume(claim.volume_name)
            except StoreAccessError as e:
                raise StoreAccessError(
                    f"Could not get persistent volume {claim.volume_name!r} for claim {claim.name!r}: {e.message}"
                ) from e
            volumes.append(volume)

        return volumes

    def delete_claims(self) -> int:
        """
        Delete all of the cluster's claims (best-effort).

        A failed deletion is logged and the sweep continues.

        Returns:
            Number of claims deleted

        Raises:
            StoreAccessError: Listing claims failed
        """
        self.logger.debug("deleting persistent volume claims")
        claims = self.list_claims()
        deleted = 0
        for claim in claims:
            self.logger.debug("deleting persistent volume claim %s/%s", claim.namespace, claim.name)
            try:
                self.store.delete_claim(claim.namespace, claim.name)
            except StoreAccessError as e:
                self.logger.warning("could not delete persistent volume claim: %s", e.message)
                continue
            deleted += 1

        if claims:
            self.logger.debug("persistent volume claims have been deleted")
        else:
            self.logger.debug("no persistent volume claims to delete")
        return deleted
