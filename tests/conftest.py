"""
Shared fixtures: a small project with two VPCs and a handful of subnets,
plus a helper to build parameter sets tersely.
"""

import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from gnpguard.cloud.provider import InventoryCloud
from gnpguard.cluster.store import ParamSetStore
from gnpguard.core.config import EngineSettings
from gnpguard.core.errors import TransportError
from gnpguard.core.models import ParamSet, PodIPv4Ranges, SubnetSnapshot

T0 = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class RecordingCloud(InventoryCloud):
    """InventoryCloud that logs every lookup and can simulate an API outage."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = []
        self.fail_with = None

    def _record(self, call):
        self.calls.append(call)
        if self.fail_with is not None:
            raise TransportError(str(self.fail_with)) from self.fail_with

    def get_subnetwork(self, region, name):
        self._record(f"subnetworks.get {region}/{name}")
        return super().get_subnetwork(region, name)

    def get_network(self, name):
        self._record(f"networks.get {name}")
        return super().get_network(name)


class BrokenStore(ParamSetStore):
    """A lister whose cache cannot be read."""

    def __init__(self, params=(), error=None):
        super().__init__(params)
        self.error = error or RuntimeError("cache not synced")

    def list(self):
        raise TransportError(f"listing GKENetworkParamSets failed: {self.error}") from self.error

    def get(self, name):
        raise TransportError(f"getting GKENetworkParamSet {name} failed: {self.error}") from self.error


def make_params(name="gnp", vpc="", subnet="", device_mode="", ranges=None,
                attachment="", created_offset=0):
    """ranges=None leaves podIPv4Ranges out; ranges=[] sets it with no names."""
    return ParamSet(
        name=name,
        vpc=vpc,
        vpc_subnet=subnet,
        device_mode=device_mode,
        pod_ipv4_ranges=PodIPv4Ranges(range_names=list(ranges)) if ranges is not None else None,
        network_attachment=attachment,
        creation_timestamp=T0 + timedelta(seconds=created_offset),
    )


@pytest.fixture
def settings():
    return EngineSettings(
        region="us-central1",
        network_url="https://www.googleapis.com/compute/v1/projects/proj/global/networks/default",
    )


@pytest.fixture
def cloud(settings):
    return RecordingCloud(
        settings,
        networks=["default", "vpc-a", "vpc-b"],
        subnetworks=[
            SubnetSnapshot(name="default", network="default",
                           secondary_ranges={"pods-default": "10.4.0.0/14"}),
            SubnetSnapshot(name="subnet-a", network="vpc-a",
                           secondary_ranges={"pods-a": "10.8.0.0/16", "pods-a2": "10.9.0.0/16"}),
            SubnetSnapshot(name="subnet-b", network="vpc-b"),
            SubnetSnapshot(name="s1", network="vpc-b"),
        ],
    )


@pytest.fixture
def empty_store():
    return ParamSetStore()
