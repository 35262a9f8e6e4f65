#!/usr/bin/env python3
"""
GNPGUARD MANIFEST LOADER
------------------------
Turns Kubernetes YAML (as produced by `kubectl get -o yaml`) and a cloud
inventory file into the snapshot models the validators consume.

Multi-document files and `kind: List` wrappers are both accepted. Unknown
kinds are skipped.

Author: GNPGuard Team
Date: 2026-10-19
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ruamel.yaml import YAML, YAMLError

from gnpguard.cloud.provider import InventoryCloud
from gnpguard.core.config import EngineSettings
from gnpguard.core.errors import ManifestError
from gnpguard.core.models import NetworkResource, NodeInfo, ParamSet, PodIPv4Ranges, SubnetSnapshot

logger = logging.getLogger("gnpguard.loader")

PARAMSET_KIND = "GKENetworkParamSet"
NETWORK_KIND = "Network"
NODE_KIND = "Node"

YAML_EXTENSIONS = (".yaml", ".yml")


@dataclass
class ManifestBundle:
    """Everything found in one or more manifest files."""
    params: List[ParamSet] = field(default_factory=list)
    networks: List[NetworkResource] = field(default_factory=list)
    nodes: List[NodeInfo] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)

    def merge(self, other: "ManifestBundle"):
        self.params.extend(other.params)
        self.networks.extend(other.networks)
        self.nodes.extend(other.nodes)
        self.sources.extend(other.sources)


def _yaml() -> YAML:
    return YAML(typ="safe")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Accepts RFC 3339 strings and YAML timestamps; always returns an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, date):
        ts = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        ts = datetime.fromisoformat(text)
    else:
        raise ValueError(f"unsupported timestamp {value!r}")
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _metadata(doc: Dict[str, Any]) -> Dict[str, Any]:
    meta = doc.get("metadata") or {}
    if not isinstance(meta, dict) or not meta.get("name"):
        raise ValueError(f"{doc.get('kind')} without metadata.name")
    return meta


def _str_field(spec: Dict[str, Any], key: str) -> str:
    value = spec.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"spec.{key} must be a string, got {type(value).__name__}")
    return value


def paramset_from_doc(doc: Dict[str, Any]) -> ParamSet:
    meta = _metadata(doc)
    spec = doc.get("spec") or {}

    ranges = None
    raw_ranges = spec.get("podIPv4Ranges")
    if raw_ranges is not None:
        names = (raw_ranges or {}).get("rangeNames") or []
        if not isinstance(names, list):
            raise ValueError("spec.podIPv4Ranges.rangeNames must be a list")
        ranges = PodIPv4Ranges(range_names=[str(n) for n in names])

    return ParamSet(
        name=str(meta["name"]),
        vpc=_str_field(spec, "vpc"),
        vpc_subnet=_str_field(spec, "vpcSubnet"),
        device_mode=_str_field(spec, "deviceMode"),
        pod_ipv4_ranges=ranges,
        network_attachment=_str_field(spec, "networkAttachment"),
        creation_timestamp=parse_timestamp(meta.get("creationTimestamp")),
    )


def network_from_doc(doc: Dict[str, Any]) -> NetworkResource:
    meta = _metadata(doc)
    spec = doc.get("spec") or {}
    params_ref = spec.get("parametersRef") or {}
    return NetworkResource(
        name=str(meta["name"]),
        type=_str_field(spec, "type"),
        params_ref=str(params_ref.get("name") or ""),
    )


def node_from_doc(doc: Dict[str, Any]) -> NodeInfo:
    meta = _metadata(doc)
    labels = meta.get("labels") or {}
    return NodeInfo(name=str(meta["name"]), labels={str(k): str(v) for k, v in labels.items()})


_CONVERTERS = {
    PARAMSET_KIND: ("params", paramset_from_doc),
    NETWORK_KIND: ("networks", network_from_doc),
    NODE_KIND: ("nodes", node_from_doc),
}


def _flatten(docs: Iterable[Any], source: Union[str, Path]) -> Iterable[Dict[str, Any]]:
    for doc in docs:
        if not isinstance(doc, dict):
            continue
        kind = doc.get("kind") or ""
        if not isinstance(kind, str):
            raise ManifestError(source, f"kind must be a string, got {type(kind).__name__}")
        if kind == "List" or (kind.endswith("List") and "items" in doc):
            yield from _flatten(doc.get("items") or [], source)
        else:
            yield doc


def load_documents(text: str, source: Union[str, Path] = "<string>") -> ManifestBundle:
    """Parses YAML text into a bundle of models."""
    try:
        docs = list(_yaml().load_all(text))
    except YAMLError as e:
        raise ManifestError(source, f"invalid YAML: {e}") from e

    bundle = ManifestBundle(sources=[str(source)])
    for doc in _flatten(docs, source):
        kind = doc.get("kind")
        if kind not in _CONVERTERS:
            logger.debug(f"{source}: skipping kind {kind!r}")
            continue
        attr, convert = _CONVERTERS[kind]
        try:
            getattr(bundle, attr).append(convert(doc))
        except (ValueError, TypeError, AttributeError) as e:
            raise ManifestError(source, f"malformed {kind}: {e}") from e
    return bundle


def discover_manifests(path: Path) -> List[Path]:
    """Lists YAML files under path (or path itself). Symlinks are skipped."""
    if path.is_file():
        return [path]
    return sorted(
        f for f in path.rglob("*")
        if f.suffix.lower() in YAML_EXTENSIONS and f.is_file() and not f.is_symlink()
    )


def load_manifests(path: Union[str, Path], exclude: Iterable[Union[str, Path]] = ()) -> ManifestBundle:
    root = Path(path)
    if not root.exists():
        raise ManifestError(root, "path not found")

    skip = {Path(p).resolve() for p in exclude}
    bundle = ManifestBundle()
    for file_path in discover_manifests(root):
        if file_path.resolve() in skip:
            continue
        try:
            text = file_path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestError(file_path, f"unreadable: {e}") from e
        bundle.merge(load_documents(text, file_path))

    logger.info(f"Loaded {len(bundle.params)} param sets, {len(bundle.networks)} networks, "
                f"{len(bundle.nodes)} nodes from {len(bundle.sources)} file(s)")
    return bundle


def _bool_field(section: Dict[str, Any], key: str, source: Union[str, Path]) -> bool:
    """Only real YAML booleans; a quoted "false" must not read as True."""
    value = section.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ManifestError(source, f"{key} must be true or false, got {value!r}")
    return value


def inventory_from_doc(doc: Dict[str, Any], source: Union[str, Path] = "<inventory>") -> InventoryCloud:
    """
    Builds an InventoryCloud from a document shaped like:

        cloud:
          project: my-project
          region: us-central1
          networkURL: projects/my-project/global/networks/default
          sharedVPC: false
          networks: [default, vpc-a]
          subnetworks:
            - name: subnet-a
              network: vpc-a
              secondaryRanges:
                - {rangeName: pods-a, ipCidrRange: 10.8.0.0/14}
    """
    cloud = (doc or {}).get("cloud")
    if not isinstance(cloud, dict):
        raise ManifestError(source, "missing top-level 'cloud' section")

    try:
        settings = EngineSettings(
            region=str(cloud.get("region") or ""),
            shared_vpc=_bool_field(cloud, "sharedVPC", source),
            network_url=str(cloud.get("networkURL") or ""),
        )
        subnets = []
        for raw in cloud.get("subnetworks") or []:
            ranges = {}
            for sr in raw.get("secondaryRanges") or raw.get("secondaryIpRanges") or []:
                ranges[str(sr["rangeName"])] = str(sr.get("ipCidrRange") or "")
            subnets.append(SubnetSnapshot(
                name=str(raw["name"]),
                network=str(raw.get("network") or ""),
                region=str(raw.get("region") or settings.region),
                secondary_ranges=ranges,
            ))
        networks = [str(n) for n in cloud.get("networks") or []]
    except (KeyError, TypeError, AttributeError) as e:
        raise ManifestError(source, f"malformed inventory: {e}") from e

    return InventoryCloud(settings, networks=networks, subnetworks=subnets)


def load_inventory(path: Union[str, Path]) -> InventoryCloud:
    file_path = Path(path)
    try:
        doc = _yaml().load(file_path.read_text(encoding="utf-8-sig"))
    except OSError as e:
        raise ManifestError(file_path, f"unreadable: {e}") from e
    except YAMLError as e:
        raise ManifestError(file_path, f"invalid YAML: {e}") from e
    return inventory_from_doc(doc, file_path)
