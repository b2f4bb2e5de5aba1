"""AWS Elastic Block Store resize backend."""

import logging
import time
from typing import Any, Callable, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from volume_reconciler.cluster.exceptions import BlockResizeError, ProviderConnectionError
from volume_reconciler.cluster.models import Volume
from volume_reconciler.providers.base import VolumeResizer

logger = logging.getLogger(__name__)

EBS_PROVISIONER = "kubernetes.io/aws-ebs"
EBS_SOURCE_KEY = "awsElasticBlockStore"
EBS_VOLUME_ID_START = "/vol-"

STATE_MODIFYING = "modifying"
STATE_OPTIMIZING = "optimizing"
STATE_COMPLETED = "completed"
STATE_FAILED = "failed"


class EBSVolumeResizer(VolumeResizer):
    """Grows EBS volumes through the EC2 ModifyVolume API.

    The EC2 client is the provider connection: it is created by
    `connect_to_provider` and dropped by `disconnect_from_provider`.
    """

    name = "ebs"

    def __init__(
        self,
        region: str,
        timeout: int = 300,
        poll_interval: float = 5,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the EBS resizer.

        Args:
            region: AWS region holding the volumes (e.g., eu-central-1)
            timeout: Seconds to wait for a modification to leave the "modifying" state
            poll_interval: Seconds between modification status checks
            sleep: Sleep function used while polling
        """
        self.region = region
        self.timeout = timeout
        self.poll_interval = poll_interval
        self._sleep = sleep
        self.connection: Optional[Any] = None

    def volume_belongs_to_provider(self, volume: Volume) -> bool:
        return EBS_SOURCE_KEY in volume.source and volume.provisioned_by == EBS_PROVISIONER

    def is_connected_to_provider(self) -> bool:
        return self.connection is not None

    def connect_to_provider(self) -> None:
        try:
            self.connection = boto3.client("ec2", region_name=self.region)
        except (BotoCoreError, ClientError) as e:
            raise ProviderConnectionError(f"Could not connect to EC2 in region {self.region}: {e}") from e
        logger.debug("connected to EC2 in region %s", self.region)

    def disconnect_from_provider(self) -> None:
        self.connection = None

    def get_provider_volume_id(self, volume: Volume) -> str:
        """Convert e.g. aws://eu-central-1b/vol-00f93d4827217c629 to vol-00f93d4827217c629."""
        volume_id = (volume.source.get(EBS_SOURCE_KEY) or {}).get("volumeID", "")
        if not volume_id:
            raise ProviderConnectionError(f"Volume id is empty for volume {volume.name!r}")

        if volume_id.startswith(EBS_VOLUME_ID_START[1:]):
            return volume_id
        idx = volume_id.rfind(EBS_VOLUME_ID_START)
        if idx < 0:
            raise ProviderConnectionError(f"Malformed EBS volume id {volume_id!r}")
        return volume_id[idx + 1:]

    def resize_volume(self, volume_id: str, new_size_gb: int) -> None:
        if self.connection is None:
            raise BlockResizeError(f"Cannot resize EBS volume {volume_id}: not connected to EC2")

        try:
            response = self.connection.describe_volumes(VolumeIds=[volume_id])
        except (BotoCoreError, ClientError) as e:
            raise BlockResizeError(f"Could not get information about the volume {volume_id}: {e}") from e

        volumes = response.get("Volumes", [])
        if len(volumes) != 1 or volumes[0].get("VolumeId") != volume_id:
            raise BlockResizeError(f"Describe volume {volume_id!r} returned information about a non-matching volume")
        if volumes[0].get("Size") == new_size_gb:
            logger.debug("EBS volume %s is already %d GB", volume_id, new_size_gb)
            return

        try:
            response = self.connection.modify_volume(VolumeId=volume_id, Size=new_size_gb)
        except (BotoCoreError, ClientError) as e:
            raise BlockResizeError(f"Could not modify EBS volume {volume_id}: {e}") from e

        state = response.get("VolumeModification", {}).get("ModificationState", "")
        if state == STATE_FAILED:
            raise BlockResizeError(f"Could not modify EBS volume {volume_id}: modification state failed")
        if not state:
            raise BlockResizeError(f"Received empty modification status for EBS volume {volume_id}")
        if state in (STATE_OPTIMIZING, STATE_COMPLETED):
            return

        self._wait_for_modification(volume_id)

    def _wait_for_modification(self, volume_id: str) -> None:
        """Poll until the volume modification leaves the "modifying" state."""
        deadline = time.monotonic() + self.timeout
        while True:
            try:
                response = self.connection.describe_volumes_modifications(VolumeIds=[volume_id])
            except (BotoCoreError, ClientError) as e:
                raise BlockResizeError(f"Could not describe volume modification for {volume_id}: {e}") from e

            modifications = response.get("VolumesModifications", [])
            if len(modifications) != 1:
                raise BlockResizeError(
                    f"Describe volume modification didn't return one record for volume {volume_id!r}"
                )
            if modifications[0].get("VolumeId") != volume_id:
                raise BlockResizeError(
                    f"Non-matching volume id when describing modifications: {modifications[0].get('VolumeId')!r} "
                    f"is different from {volume_id!r}"
                )

            state = modifications[0].get("ModificationState", "")
            if state == STATE_FAILED:
                raise BlockResizeError(f"Could not modify EBS volume {volume_id}: modification state failed")
            if state != STATE_MODIFYING:
                return

            if time.monotonic() >= deadline:
                raise BlockResizeError(
                    f"Timed out after {self.timeout}s waiting for EBS volume {volume_id} modification"
                )
            self._sleep(self.poll_interval)
