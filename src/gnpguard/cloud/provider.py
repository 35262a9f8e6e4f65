#!/usr/bin/env python3
"""
GNPGUARD CLOUD PROVIDER
-----------------------
The read-only slice of the GCE API the validators depend on, and an
inventory-backed implementation used by the CLI and the test suite.

Author: GNPGuard Team
Date: 2026-10-19
"""

import logging
import re
from typing import Dict, Iterable, Optional

from gnpguard.core.config import EngineSettings
from gnpguard.core.errors import ResourceNotFoundError, TransportError
from gnpguard.core.models import SubnetSnapshot

logger = logging.getLogger("gnpguard.cloud")

# Full or partial GCE resource URL of a global network
_NETWORK_URL_RE = re.compile(
    r"^(?:https?://[^/]+/compute/(?:v1|beta|alpha)/)?projects/([^/]+)/global/networks/([^/]+)$"
)
_PLAIN_NAME_RE = re.compile(r"^[a-z]([-a-z0-9]*[a-z0-9])?$")


def parse_network_name(network_url: str) -> str:
    """
    Extracts the network name out of a GCE network resource URL.

    Raises TransportError when the URL cannot be parsed: the validator cannot
    decide anything about the default VPC without it.
    """
    url = (network_url or "").strip()
    if not url:
        raise TransportError("cluster network URL is not configured")

    match = _NETWORK_URL_RE.match(url)
    if match:
        return match.group(2)
    if _PLAIN_NAME_RE.match(url):
        return url
    raise TransportError(f"unable to parse network URL {url!r}")


class CloudProvider:
    """
    Capabilities the referential validator consumes.
    Implementations raise ResourceNotFoundError for absent objects and
    TransportError for anything else that went wrong while asking.
    """

    def region(self) -> str:
        raise NotImplementedError

    def on_xpn(self) -> bool:
        """True when the cluster network lives in a host (shared VPC) project."""
        raise NotImplementedError

    def network_url(self) -> str:
        raise NotImplementedError

    def get_subnetwork(self, region: str, name: str) -> SubnetSnapshot:
        raise NotImplementedError

    def get_network(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def default_network_name(self) -> str:
        return parse_network_name(self.network_url())


class InventoryCloud(CloudProvider):
    """
    A static cloud described by an inventory file.

    Useful offline: the CLI audits manifests against an exported snapshot of
    the project, and tests build deterministic fixtures with it.
    """

    def __init__(self, settings: EngineSettings,
                 networks: Iterable[str] = (),
                 subnetworks: Iterable[SubnetSnapshot] = ()):
        self.settings = settings
        self.networks = set(networks)
        self.subnetworks: Dict[tuple, SubnetSnapshot] = {}
        for subnet in subnetworks:
            self.subnetworks[(subnet.region or settings.region, subnet.name)] = subnet

    def configure(self, settings: EngineSettings):
        self.settings = settings

    def region(self) -> str:
        return self.settings.region

    def on_xpn(self) -> bool:
        return self.settings.shared_vpc

    def network_url(self) -> str:
        return self.settings.network_url

    def get_subnetwork(self, region: str, name: str) -> SubnetSnapshot:
        subnet = self.subnetworks.get((region, name))
        if subnet is None:
            logger.debug(f"Inventory has no subnetwork {region}/{name}")
            raise ResourceNotFoundError("Subnetwork", f"{region}/{name}")
        return subnet

    def get_network(self, name: str) -> Optional[str]:
        if name not in self.networks:
            logger.debug(f"Inventory has no network {name}")
            raise ResourceNotFoundError("Network", name)
        return name
