#!/usr/bin/env python3
"""
GNPGUARD VALIDATOR - The Judge
------------------------------
Decides whether a GKENetworkParamSet is usable. Checks run in a fixed order
and the first failure wins:

  1. Field combinations  (pure, no I/O)
  2. Attachment format   (pure, attachment mode only)
  3. Subnet lookup       (cloud)
  4. Cloud references    (cloud + sibling parameter sets)

A separate pure check judges whether a Network and the parameter set it
references are compatible.

Business failures are returned as verdicts. Only TransportError escapes,
meaning "could not ask", never "the answer is no".

Author: GNPGuard Team
Date: 2026-10-19
"""

import logging
import re
from typing import Optional, Tuple

from gnpguard.cloud.provider import CloudProvider
from gnpguard.cluster.store import ParamSetStore
from gnpguard.core.conditions import (
    NetworkCrossVerdict,
    NetworkParamsReason,
    ParamSetReason,
    ParamSetVerdict,
)
from gnpguard.core.errors import ResourceNotFoundError
from gnpguard.core.models import ZERO_TIME, NetworkResource, NetworkType, ParamSet, SubnetSnapshot
from gnpguard.validator.ranges import has_range_names

logger = logging.getLogger("gnpguard.validator")

# projects/PROJECT_ID/regions/REGION/networkAttachments/NETWORK_ATTACHMENT
NETWORK_ATTACHMENT_RE = re.compile(r"projects/([^/]+)/regions/([^/]+)/networkAttachments/([^/]+)")


def validate_field_combinations(params: ParamSet) -> ParamSetVerdict:
    """
    Checks which optional fields may be set together. Ensures the minimum
    fields are present and rejects unsupported combinations.
    """
    has_attachment = params.network_attachment != ""
    has_vpc = params.vpc != ""
    has_subnet = params.vpc_subnet != ""
    has_device_mode = params.device_mode != ""
    has_ranges = has_range_names(params)

    if not has_attachment and (not has_vpc or not has_subnet):
        return ParamSetVerdict.fail(
            ParamSetReason.CONFIG_INVALID,
            "NetworkAttachment or (VPC + VPCSubnet) must be specified",
        )

    if has_attachment:
        if has_vpc or has_subnet or has_device_mode or has_ranges:
            return ParamSetVerdict.fail(
                ParamSetReason.CONFIG_INVALID,
                "When NetworkAttachment is specified, none of the following can be specified: "
                "(VPC, VPCSubnet, DeviceMode, PodIPv4Ranges)",
            )
        return ParamSetVerdict.ok()

    if not has_ranges and not has_device_mode:
        return ParamSetVerdict.fail(
            ParamSetReason.SECONDARY_RANGE_AND_DEVICE_MODE_UNSPECIFIED,
            "One of PodIPv4Ranges or DeviceMode must be specified.",
        )

    if has_ranges and has_device_mode:
        return ParamSetVerdict.fail(
            ParamSetReason.DEVICE_MODE_CANT_BE_USED_WITH_SECONDARY_RANGE,
            "PodIPv4Ranges and DeviceMode can not be specified at the same time",
        )

    return ParamSetVerdict.ok()


def validate_network_attachment(net_attachment: str) -> ParamSetVerdict:
    """Checks the network attachment name is a fully qualified resource name."""
    if not NETWORK_ATTACHMENT_RE.search(net_attachment or ""):
        return ParamSetVerdict.fail(
            ParamSetReason.NETWORK_ATTACHMENT_INVALID,
            f"invalid network attachment name: {net_attachment!r}. "
            "Must match projects/PROJECT_ID/regions/REGION/networkAttachments/NETWORK_ATTACHMENT",
        )
    return ParamSetVerdict.ok()


def cross_validate_network_and_params(network: NetworkResource, params: ParamSet) -> NetworkCrossVerdict:
    """Checks a Network and the parameter set it references are compatible."""
    has_ranges = has_range_names(params)
    has_vpc = params.vpc != ""
    has_subnet = params.vpc_subnet != ""
    has_attachment = params.network_attachment != ""

    if network.type == NetworkType.L3:
        if has_vpc and has_subnet and not has_ranges:
            return NetworkCrossVerdict.fail(
                NetworkParamsReason.L3_SECONDARY_MISSING,
                "L3 type network referring to params with (VPC + VPCSubnet) pair "
                "requires secondary range to be specified in params",
            )
    elif has_attachment:
        return NetworkCrossVerdict.fail(
            NetworkParamsReason.NETWORK_ATTACHMENT_UNSUPPORTED,
            "NetworkAttachment is only allowed for L3 type networks.",
        )

    if network.type == NetworkType.DEVICE and params.device_mode == "":
        return NetworkCrossVerdict.fail(
            NetworkParamsReason.DEVICE_MODE_MISSING,
            "Device type network requires device mode to be specified in params",
        )

    return NetworkCrossVerdict.ok()


class ParamSetValidator:
    """
    Validates parameter sets against the cloud and against their siblings.

    Both collaborators are injected; the validator never mutates them and
    never retries. The device mode subnet scan reads a point-in-time snapshot,
    so it is advisory: two sets created concurrently may both pass until the
    next reconciliation sees the other one.
    """

    def __init__(self, cloud: CloudProvider, store: ParamSetStore):
        self.cloud = cloud
        self.store = store

    # Pure checks are exposed here too so callers only need one object
    validate_field_combinations = staticmethod(validate_field_combinations)
    validate_network_attachment = staticmethod(validate_network_attachment)

    def get_and_validate_subnet(self, params: ParamSet) -> Tuple[Optional[SubnetSnapshot], ParamSetVerdict]:
        """Fetches the referenced subnet from the configured region."""
        if params.vpc_subnet == "":
            return None, ParamSetVerdict.fail(ParamSetReason.SUBNET_NOT_FOUND, "subnet not specified")

        try:
            subnet = self.cloud.get_subnetwork(self.cloud.region(), params.vpc_subnet)
        except ResourceNotFoundError:
            subnet = None

        if subnet is None:
            logger.debug(f"Subnet {params.vpc_subnet} of {params.name} not found")
            return None, ParamSetVerdict.fail(
                ParamSetReason.SUBNET_NOT_FOUND,
                f"subnet: {params.vpc_subnet} not found in VPC: {params.vpc}",
            )
        return subnet, ParamSetVerdict.ok()

    def validate_against_cloud(self, params: ParamSet, subnet: Optional[SubnetSnapshot] = None) -> ParamSetVerdict:
        """
        Confirms the referenced VPC, secondary ranges and device mode subnet
        are usable. Raises TransportError when the cloud or the cluster cache
        cannot be read.
        """
        if params.vpc == "":
            return ParamSetVerdict.fail(ParamSetReason.VPC_NOT_FOUND, "VPC not specified")

        # On a shared VPC the network lives in the host project; we can't look it up
        if not self.cloud.on_xpn():
            try:
                network = self.cloud.get_network(params.vpc)
            except ResourceNotFoundError:
                network = None
            if network is None:
                return ParamSetVerdict.fail(ParamSetReason.VPC_NOT_FOUND, f"VPC: {params.vpc} not found")

        has_ranges = has_range_names(params)
        has_device_mode = params.device_mode != ""
        if not has_ranges and not has_device_mode:
            return ParamSetVerdict.fail(
                ParamSetReason.SECONDARY_RANGE_AND_DEVICE_MODE_UNSPECIFIED,
                "SecondaryRange and DeviceMode are unspecified. One must be specified.",
            )

        if has_ranges and not has_device_mode:
            available = subnet.range_names if subnet is not None else set()
            for range_name in params.pod_ipv4_ranges.range_names:
                if range_name not in available:
                    return ParamSetVerdict.fail(
                        ParamSetReason.SECONDARY_RANGE_NOT_FOUND,
                        f"secondary range: {range_name} not found in subnet: {params.vpc_subnet}",
                    )

        if has_ranges and has_device_mode:
            return ParamSetVerdict.fail(
                ParamSetReason.DEVICE_MODE_CANT_BE_USED_WITH_SECONDARY_RANGE,
                "deviceMode and secondary range can not be specified at the same time",
            )

        if has_device_mode:
            if params.vpc == self.cloud.default_network_name():
                return ParamSetVerdict.fail(
                    ParamSetReason.DEVICE_MODE_CANT_USE_DEFAULT_VPC,
                    "GNP with deviceMode can't reference the default VPC",
                )

            other = self._earliest_subnet_claimant(params)
            if other is not None:
                return ParamSetVerdict.fail(
                    ParamSetReason.DEVICE_MODE_SUBNET_ALREADY_IN_USE,
                    "GNP with deviceMode can't reference a subnet already in use. "
                    f"Subnet '{params.vpc_subnet}' is already in use by '{other.name}'",
                )

        return ParamSetVerdict.ok()

    def _earliest_subnet_claimant(self, params: ParamSet) -> Optional[ParamSet]:
        """
        Oldest other parameter set on the same subnet that this one was
        created strictly after. Equal timestamps never conflict.
        """
        siblings = sorted(
            self.store.list(),
            key=lambda p: (p.creation_timestamp or ZERO_TIME, p.name),
        )
        for other in siblings:
            if (other.name != params.name
                    and other.vpc_subnet == params.vpc_subnet
                    and params.created_after(other)):
                return other
        return None
