"""
Pod range helpers shared by the validators and the node handling code.
"""

import logging
from collections import Counter
from typing import List, Sequence

from gnpguard.cluster.store import ParamSetStore
from gnpguard.core.errors import GnpGuardError, ResourceNotFoundError
from gnpguard.core.models import (
    DEFAULT_POD_NETWORK_NAME,
    NODE_POOL_POD_RANGE_LABEL,
    NodeInfo,
    ParamSet,
)

logger = logging.getLogger("gnpguard.ranges")


def has_range_names(params: ParamSet) -> bool:
    """True if podIPv4Ranges is present and lists at least one range name."""
    ranges = params.pod_ipv4_ranges
    return ranges is not None and len(ranges.range_names) > 0


def same_string_slice(x: Sequence[str], y: Sequence[str]) -> bool:
    """True if both sequences hold the same elements with the same multiplicity, in any order."""
    if len(x) != len(y):
        return False
    return Counter(x) == Counter(y)


def same_pod_ranges(params: ParamSet, original: ParamSet) -> bool:
    """
    True if neither parameter set has range names, or both have the same
    range names. False when only one side has ranges.
    """
    has_new, has_old = has_range_names(params), has_range_names(original)
    if not has_new and not has_old:
        return True
    if has_new and has_old:
        return same_string_slice(params.pod_ipv4_ranges.range_names,
                                 original.pod_ipv4_ranges.range_names)
    return False


def has_new_pod_range(label_value: str, default_range_names: Sequence[str]) -> bool:
    """
    True if a node's pod range label names a range outside the default set.
    Node pools never share pod ranges, so membership is enough.
    """
    return bool(label_value) and label_value not in default_range_names


def params_pod_ranges(store: ParamSetStore, params_name: str) -> List[str]:
    """Range names of the named parameter set. Raises if it has none."""
    params = store.get(params_name)
    if has_range_names(params):
        return list(params.pod_ipv4_ranges.range_names)
    raise ResourceNotFoundError("PodIPv4Ranges", f"params {params.name}")


def node_has_non_default_pod_range(node: NodeInfo, store: ParamSetStore,
                                   default_params_name: str = DEFAULT_POD_NETWORK_NAME) -> bool:
    """True if the node was assigned a pod range outside the default parameter set."""
    try:
        default_ranges = params_pod_ranges(store, default_params_name)
    except GnpGuardError as e:
        logger.debug(f"check new Pod range on node {node.name!r} error: {e}")
        return False
    return has_new_pod_range(node.labels.get(NODE_POOL_POD_RANGE_LABEL, ""), default_ranges)
