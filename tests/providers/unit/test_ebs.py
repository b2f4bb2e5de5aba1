"""Unit tests for the EBS resize backend."""

import unittest
from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import ClientError

from volume_reconciler.cluster.exceptions import BlockResizeError, ProviderConnectionError
from volume_reconciler.cluster.models import Volume
from volume_reconciler.providers import ebs


def _client_error(operation):
    return ClientError({"Error": {"Code": "IncorrectState", "Message": "volume busy"}}, operation)


class TestEBSVolumeResizer(unittest.TestCase):
    """Test EBSVolumeResizer class."""

    def setUp(self):
        """Set up test fixtures."""
        self.sleep = Mock()
        self.resizer = ebs.EBSVolumeResizer(region="eu-central-1", timeout=30, poll_interval=2, sleep=self.sleep)
        self.ec2 = Mock()
        self.ec2.describe_volumes.return_value = {"Volumes": [{"VolumeId": "vol-0abc", "Size": 10}]}

    def _create_volume(self, volume_id="aws://eu-central-1b/vol-0abc", provisioner="kubernetes.io/aws-ebs"):
        return Volume(
            name="pv-0",
            capacity="10Gi",
            annotations={"pv.kubernetes.io/provisioned-by": provisioner},
            source={"awsElasticBlockStore": {"volumeID": volume_id}},
        )

    def test_volume_belongs_to_provider(self):
        assert self.resizer.volume_belongs_to_provider(self._create_volume()) is True

    def test_volume_with_other_provisioner(self):
        volume = self._create_volume(provisioner="kubernetes.io/gce-pd")

        assert self.resizer.volume_belongs_to_provider(volume) is False

    def test_volume_without_ebs_source(self):
        volume = self._create_volume()
        volume.source = {"gcePersistentDisk": {"pdName": "disk-1"}}

        assert self.resizer.volume_belongs_to_provider(volume) is False

    @patch("volume_reconciler.providers.ebs.boto3")
    def test_connect_and_disconnect(self, mock_boto3):
        """Test that the EC2 client is the provider connection."""
        assert self.resizer.is_connected_to_provider() is False

        self.resizer.connect_to_provider()

        mock_boto3.client.assert_called_once_with("ec2", region_name="eu-central-1")
        assert self.resizer.is_connected_to_provider() is True

        self.resizer.disconnect_from_provider()
        assert self.resizer.is_connected_to_provider() is False

    @patch("volume_reconciler.providers.ebs.boto3")
    def test_connect_failure(self, mock_boto3):
        mock_boto3.client.side_effect = _client_error("CreateClient")

        with pytest.raises(ProviderConnectionError, match="eu-central-1"):
            self.resizer.connect_to_provider()

        assert self.resizer.is_connected_to_provider() is False

    def test_get_provider_volume_id(self):
        assert self.resizer.get_provider_volume_id(self._create_volume()) == "vol-0abc"

    def test_get_provider_volume_id_bare(self):
        assert self.resizer.get_provider_volume_id(self._create_volume(volume_id="vol-0abc")) == "vol-0abc"

    def test_get_provider_volume_id_empty(self):
        with pytest.raises(ProviderConnectionError, match="Volume id is empty"):
            self.resizer.get_provider_volume_id(self._create_volume(volume_id=""))

    def test_get_provider_volume_id_malformed(self):
        with pytest.raises(ProviderConnectionError, match="Malformed EBS volume id"):
            self.resizer.get_provider_volume_id(self._create_volume(volume_id="aws://eu-central-1b/disk-1"))

    def test_resize_not_connected(self):
        with pytest.raises(BlockResizeError, match="not connected"):
            self.resizer.resize_volume("vol-0abc", 20)

    def test_resize_completes_immediately(self):
        self.resizer.connection = self.ec2
        self.ec2.modify_volume.return_value = {"VolumeModification": {"ModificationState": "optimizing"}}

        self.resizer.resize_volume("vol-0abc", 20)

        self.ec2.modify_volume.assert_called_once_with(VolumeId="vol-0abc", Size=20)
        self.ec2.describe_volumes_modifications.assert_not_called()

    def test_resize_already_at_size(self):
        """Test that a volume already at the requested size is not modified."""
        self.resizer.connection = self.ec2
        self.ec2.describe_volumes.return_value = {"Volumes": [{"VolumeId": "vol-0abc", "Size": 20}]}

        self.resizer.resize_volume("vol-0abc", 20)

        self.ec2.modify_volume.assert_not_called()

    def test_resize_waits_for_modification(self):
        self.resizer.connection = self.ec2
        self.ec2.modify_volume.return_value = {"VolumeModification": {"ModificationState": "modifying"}}
        self.ec2.describe_volumes_modifications.side_effect = [
            {"VolumesModifications": [{"VolumeId": "vol-0abc", "ModificationState": "modifying"}]},
            {"VolumesModifications": [{"VolumeId": "vol-0abc", "ModificationState": "optimizing"}]},
        ]

        self.resizer.resize_volume("vol-0abc", 20)

        assert self.ec2.describe_volumes_modifications.call_count == 2
        self.sleep.assert_called_once_with(2)

    def test_resize_modification_failed(self):
        self.resizer.connection = self.ec2
        self.ec2.modify_volume.return_value = {"VolumeModification": {"ModificationState": "failed"}}

        with pytest.raises(BlockResizeError, match="modification state failed"):
            self.resizer.resize_volume("vol-0abc", 20)

    def test_resize_empty_state(self):
        self.resizer.connection = self.ec2
        self.ec2.modify_volume.return_value = {"VolumeModification": {}}

        with pytest.raises(BlockResizeError, match="empty modification status"):
            self.resizer.resize_volume("vol-0abc", 20)

    def test_resize_modify_error(self):
        self.resizer.connection = self.ec2
        self.ec2.modify_volume.side_effect = _client_error("ModifyVolume")

        with pytest.raises(BlockResizeError, match="Could not modify EBS volume vol-0abc"):
            self.resizer.resize_volume("vol-0abc", 20)

    def test_resize_describe_mismatch(self):
        self.resizer.connection = self.ec2
        self.ec2.describe_volumes.return_value = {"Volumes": [{"VolumeId": "vol-other", "Size": 10}]}

        with pytest.raises(BlockResizeError, match="non-matching volume"):
            self.resizer.resize_volume("vol-0abc", 20)

    def test_resize_modification_record_mismatch(self):
        self.resizer.connection = self.ec2
        self.ec2.modify_volume.return_value = {"VolumeModification": {"ModificationState": "modifying"}}
        self.ec2.describe_volumes_modifications.return_value = {"VolumesModifications": []}

        with pytest.raises(BlockResizeError, match="didn't return one record"):
            self.resizer.resize_volume("vol-0abc", 20)

    @patch("volume_reconciler.providers.ebs.time")
    def test_resize_times_out(self, mock_time):
        """Test that polling stops once the timeout elapses."""
        mock_time.monotonic.side_effect = [0, 10, 31]
        self.resizer.connection = self.ec2
        self.ec2.modify_volume.return_value = {"VolumeModification": {"ModificationState": "modifying"}}
        self.ec2.describe_volumes_modifications.return_value = {
            "VolumesModifications": [{"VolumeId": "vol-0abc", "ModificationState": "modifying"}]
        }

        with pytest.raises(BlockResizeError, match="Timed out after 30s"):
            self.resizer.resize_volume("vol-0abc", 20)

        assert self.sleep.call_count == 1
