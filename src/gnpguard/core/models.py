#!/usr/bin/env python3
"""
GNPGUARD CORE MODELS
--------------------
Defines the resource shapes the validators reason about. These are plain
snapshots of cluster objects (GKENetworkParamSet, Network, Node) and of
cloud objects (Subnetwork); nothing here talks to the API server or GCE.

Author: GNPGuard Team
Date: 2026-10-19
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Set, Union

# Name of the parameter set backing the cluster's default pod network
DEFAULT_POD_NETWORK_NAME = "default"

# Node label carrying the pod range assigned to the node's node pool
NODE_POOL_POD_RANGE_LABEL = "cloud.google.com/gke-np-default-pod-range"

# Stand-in for an unset creationTimestamp
ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)


class NetworkType(str, Enum):
    """Network.spec.type values the cross validation cares about."""
    L3 = "L3"
    DEVICE = "Device"
    L2 = "L2"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Union["NetworkType", str]:
        """Returns the enum member for known types, the raw string otherwise."""
        try:
            return cls(raw)
        except ValueError:
            return raw or ""


@dataclass
class PodIPv4Ranges:
    """Secondary range names of the subnet used for pod IP allocation."""
    range_names: List[str] = field(default_factory=list)


@dataclass
class ParamSet:
    """
    Snapshot of a GKENetworkParamSet.

    Empty strings mean "unset", the same way the API object leaves omitted
    fields at their zero value.
    """
    name: str
    vpc: str = ""
    vpc_subnet: str = ""
    device_mode: str = ""
    pod_ipv4_ranges: Optional[PodIPv4Ranges] = None
    network_attachment: str = ""
    creation_timestamp: Optional[datetime] = None

    def __post_init__(self):
        # Naive timestamps are read as UTC so comparisons never mix kinds
        ts = self.creation_timestamp
        if ts is not None and ts.tzinfo is None:
            self.creation_timestamp = ts.replace(tzinfo=timezone.utc)

    def created_after(self, other: "ParamSet") -> bool:
        """
        Strict 'after' comparison. A missing timestamp is the zero time: the
        other side then counts as oldest, and self is never after anything.
        """
        if self.creation_timestamp is None:
            return False
        return self.creation_timestamp > (other.creation_timestamp or ZERO_TIME)


@dataclass
class SubnetSnapshot:
    """Read-only view of a GCE subnetwork as fetched for one reconciliation."""
    name: str
    network: str = ""
    region: str = ""
    secondary_ranges: Dict[str, str] = field(default_factory=dict)  # rangeName -> CIDR

    @property
    def range_names(self) -> Set[str]:
        return set(self.secondary_ranges)


@dataclass
class NetworkResource:
    """Snapshot of a networking.gke.io Network referencing a parameter set."""
    name: str
    type: Union[NetworkType, str] = ""
    params_ref: str = ""  # spec.parametersRef.name

    def __post_init__(self):
        if not isinstance(self.type, NetworkType):
            self.type = NetworkType.parse(self.type)


@dataclass
class NodeInfo:
    """The slice of a Node object the pod range checks need."""
    name: str
    labels: Dict[str, str] = field(default_factory=dict)
