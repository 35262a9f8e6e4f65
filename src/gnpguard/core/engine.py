#!/usr/bin/env python3
"""
GNPGUARD ENGINE - The Reconciler's Brain
----------------------------------------
Runs the validators in the order the GKENetworkParamSet controller does and
projects every outcome onto a status condition. Nothing is persisted: the
reports describe the status that *would* be written.

Flow per parameter set:
  field combinations -> (attachment) format check
                     -> (VPC mode)   subnet lookup -> cloud references
Flow per network:
  look up parametersRef -> cross validation

Author: GNPGuard Team
Date: 2026-10-19
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from gnpguard.cloud.provider import CloudProvider
from gnpguard.cluster.store import ParamSetStore
from gnpguard.core.conditions import Condition, Verdict, to_condition
from gnpguard.core.errors import ResourceNotFoundError, TransportError
from gnpguard.core.models import DEFAULT_POD_NETWORK_NAME, NetworkResource, NodeInfo, ParamSet, SubnetSnapshot
from gnpguard.loader.manifests import ManifestBundle, load_manifests
from gnpguard.validator.ranges import has_range_names, node_has_non_default_pod_range, same_pod_ranges
from gnpguard.validator.validator import ParamSetValidator, cross_validate_network_and_params

logger = logging.getLogger("gnpguard.engine")


@dataclass
class ParamSetReport:
    name: str
    verdict: Optional[Verdict] = None
    condition: Optional[Condition] = None
    pod_cidrs: List[str] = field(default_factory=list)
    transport_error: str = ""

    @property
    def is_valid(self) -> bool:
        return self.verdict is not None and self.verdict.is_valid


@dataclass
class NetworkReport:
    name: str
    params_ref: str = ""
    verdict: Optional[Verdict] = None
    condition: Optional[Condition] = None
    skipped: str = ""

    @property
    def is_valid(self) -> bool:
        return self.verdict is not None and self.verdict.is_valid


@dataclass
class AuditReport:
    params: List[ParamSetReport] = field(default_factory=list)
    networks: List[NetworkReport] = field(default_factory=list)
    non_default_nodes: List[str] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)


def needs_resync(old: ParamSet, new: ParamSet) -> bool:
    """True if an update changed anything the validators look at."""
    return (
        old.vpc != new.vpc
        or old.vpc_subnet != new.vpc_subnet
        or old.device_mode != new.device_mode
        or old.network_attachment != new.network_attachment
        or not same_pod_ranges(old, new)
    )


def pod_cidrs_for(params: ParamSet, subnet: Optional[SubnetSnapshot]) -> List[str]:
    """CIDR blocks of the secondary ranges a parameter set allocates pod IPs from."""
    if subnet is None or not has_range_names(params):
        return []
    return [subnet.secondary_ranges[n] for n in params.pod_ipv4_ranges.range_names
            if subnet.secondary_ranges.get(n)]


class ValidationEngine:
    """
    Coordinates validators for a snapshot of the cluster and the cloud.
    One engine per snapshot; build a new one when the store changes.
    """

    def __init__(self, cloud: CloudProvider, store: ParamSetStore):
        self.cloud = cloud
        self.store = store
        self.validator = ParamSetValidator(cloud, store)

    @classmethod
    def from_bundle(cls, cloud: CloudProvider, bundle: ManifestBundle) -> "ValidationEngine":
        return cls(cloud, ParamSetStore(bundle.params))

    def _finish(self, report: ParamSetReport, verdict: Verdict) -> ParamSetReport:
        report.verdict = verdict
        report.condition = to_condition(verdict)
        if not verdict.is_valid:
            logger.info(f"GKENetworkParamSet {report.name} invalid: {verdict.reason.value}: {verdict.message}")
        return report

    def evaluate_params(self, params: ParamSet) -> ParamSetReport:
        """
        Validates one parameter set. A TransportError is recorded on the report
        instead of a condition: the status must stay as it is until a retry.
        """
        report = ParamSetReport(name=params.name)

        verdict = self.validator.validate_field_combinations(params)
        if not verdict.is_valid:
            return self._finish(report, verdict)

        if params.network_attachment:
            return self._finish(report, self.validator.validate_network_attachment(params.network_attachment))

        try:
            subnet, verdict = self.validator.get_and_validate_subnet(params)
            if not verdict.is_valid:
                return self._finish(report, verdict)
            verdict = self.validator.validate_against_cloud(params, subnet)
        except TransportError as e:
            logger.warning(f"GKENetworkParamSet {params.name}: skipping status update, will retry: {e}")
            report.transport_error = str(e)
            return report

        if verdict.is_valid:
            report.pod_cidrs = pod_cidrs_for(params, subnet)
        return self._finish(report, verdict)

    def evaluate_network(self, network: NetworkResource) -> NetworkReport:
        report = NetworkReport(name=network.name, params_ref=network.params_ref)
        if not network.params_ref:
            report.skipped = "no parametersRef"
            return report

        try:
            params = self.store.get(network.params_ref)
        except ResourceNotFoundError:
            report.skipped = f"GKENetworkParamSet '{network.params_ref}' not found"
            logger.info(f"Network {network.name}: {report.skipped}")
            return report

        report.verdict = cross_validate_network_and_params(network, params)
        report.condition = to_condition(report.verdict)
        return report

    def non_default_nodes(self, nodes: List[NodeInfo], default_params_name: str) -> List[str]:
        return [n.name for n in nodes if node_has_non_default_pod_range(n, self.store, default_params_name)]

    def audit_bundle(self, bundle: ManifestBundle, default_params_name: str = DEFAULT_POD_NETWORK_NAME) -> AuditReport:
        report = AuditReport(sources=list(bundle.sources))
        report.params = [self.evaluate_params(p) for p in sorted(bundle.params, key=lambda p: p.name)]
        report.networks = [self.evaluate_network(n) for n in sorted(bundle.networks, key=lambda n: n.name)]
        report.non_default_nodes = self.non_default_nodes(bundle.nodes, default_params_name)
        return report


def audit(path: Union[str, Path], cloud: CloudProvider, default_params_name: str = DEFAULT_POD_NETWORK_NAME,
          exclude: Union[List[str], tuple] = ()) -> AuditReport:
    """Loads manifests from path and evaluates everything found there."""
    bundle = load_manifests(path, exclude=exclude)
    engine = ValidationEngine.from_bundle(cloud, bundle)
    return engine.audit_bundle(bundle, default_params_name)


def generate_summary(report: AuditReport) -> Dict[str, Any]:
    """Totals for the final report panel."""
    return {
        "param_sets": len(report.params),
        "params_ready": sum(1 for r in report.params if r.is_valid),
        "params_invalid": sum(1 for r in report.params if r.verdict is not None and not r.is_valid),
        "transport_errors": sum(1 for r in report.params if r.transport_error),
        "networks": len(report.networks),
        "networks_ready": sum(1 for r in report.networks if r.is_valid),
        "networks_invalid": sum(1 for r in report.networks if r.verdict is not None and not r.is_valid),
        "networks_skipped": sum(1 for r in report.networks if r.skipped),
        "non_default_nodes": len(report.non_default_nodes),
        "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
    }
