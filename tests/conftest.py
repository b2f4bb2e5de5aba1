"""
Pytest configuration and fixtures.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from volume_reconciler.cluster.exceptions import StoreAccessError
from volume_reconciler.cluster.models import ClaimReference, ClusterContext, Volume, VolumeClaim
from volume_reconciler.cluster.store import VolumeStore
from volume_reconciler.providers.base import VolumeResizer


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without external services")
    config.addinivalue_line("markers", "integration: tests exercising the CLI end to end")


class FakeVolumeStore(VolumeStore):
    """In-memory store recording every mutation."""

    def __init__(self, claims: Optional[List[VolumeClaim]] = None, volumes: Optional[Dict[str, Volume]] = None):
        self.claims = list(claims or [])
        self.volumes = dict(volumes or {})
        self.updates: List[tuple] = []
        self.deleted: List[tuple] = []
        self.fail_list = False
        self.fail_get = set()
        self.fail_update = set()
        self.fail_delete = set()

    def list_claims(self, labels, namespace):
        if self.fail_list:
            raise StoreAccessError("list forbidden")
        return [
            c
            for c in self.claims
            if c.namespace == namespace and all(c.labels.get(k) == v for k, v in labels.items())
        ]

    def get_volume(self, name):
        if name in self.fail_get or name not in self.volumes:
            raise StoreAccessError(f"volume {name} not found")
        return self.volumes[name]

    def update_volume_capacity(self, volume, capacity):
        if volume.name in self.fail_update:
            raise StoreAccessError("update conflict")
        self.updates.append((volume.name, capacity))
        volume.capacity = capacity
        return volume

    def delete_claim(self, namespace, name):
        if name in self.fail_delete:
            raise StoreAccessError("delete forbidden")
        self.deleted.append((namespace, name))
        self.claims = [c for c in self.claims if not (c.namespace == namespace and c.name == name)]


class FakeResizer(VolumeResizer):
    """Resize backend owning volumes whose names are listed in `owns`."""

    def __init__(self, name="fake", owns=(), fail_connect=False, fail_disconnect=False, fail_resize=False):
        self.name = name
        self.owns = set(owns)
        self.fail_connect = fail_connect
        self.fail_disconnect = fail_disconnect
        self.fail_resize = fail_resize
        self.connected = False
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.belongs_calls = 0
        self.resize_calls: List[tuple] = []

    def volume_belongs_to_provider(self, volume):
        self.belongs_calls += 1
        return volume.name in self.owns

    def is_connected_to_provider(self):
        return self.connected

    def connect_to_provider(self):
        self.connect_calls += 1
        if self.fail_connect:
            raise RuntimeError("credentials expired")
        self.connected = True

    def disconnect_from_provider(self):
        self.disconnect_calls += 1
        self.connected = False
        if self.fail_disconnect:
            raise RuntimeError("connection reset")

    def get_provider_volume_id(self, volume):
        return f"id-{volume.name}"

    def resize_volume(self, volume_id, new_size_gb):
        if self.fail_resize:
            raise RuntimeError("quota exceeded")
        self.resize_calls.append((volume_id, new_size_gb))


def make_claim(name: str, volume_name: str, namespace: str = "db", cluster: str = "mycluster") -> VolumeClaim:
    return VolumeClaim(
        name=name,
        namespace=namespace,
        volume_name=volume_name,
        labels={"application": "spilo", "cluster-name": cluster},
    )


def make_volume(name: str, capacity: str, claim_name: str, namespace: str = "db") -> Volume:
    return Volume(
        name=name,
        capacity=capacity,
        claim_ref=ClaimReference(namespace=namespace, name=claim_name),
    )


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)


@pytest.fixture
def cluster_context():
    """Two-replica cluster context."""
    return ClusterContext(
        name="mycluster",
        namespace="db",
        labels={"application": "spilo", "cluster-name": "mycluster"},
        replicas=2,
        logger=logging.getLogger("tests.cluster"),
    )


@pytest.fixture
def two_volume_store():
    """Store holding two 10Gi volumes bound to replicas 0 and 1."""
    claims = [
        make_claim("pgdata-mycluster-0", "pv-0"),
        make_claim("pgdata-mycluster-1", "pv-1"),
    ]
    volumes = {
        "pv-0": make_volume("pv-0", "10Gi", "pgdata-mycluster-0"),
        "pv-1": make_volume("pv-1", "10Gi", "pgdata-mycluster-1"),
    }
    return FakeVolumeStore(claims, volumes)
