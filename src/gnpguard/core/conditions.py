#!/usr/bin/env python3
"""
GNPGUARD VERDICTS & CONDITIONS
------------------------------
Every check returns a Verdict. The reconciler turns each Verdict into a
status Condition, success or failure, so a resource status is always fully
populated and never left half stale.

Two verdict flavors exist, each with its own closed set of reason tokens:
  * ParamSetVerdict      -> condition type "Ready" on GKENetworkParamSet
  * NetworkCrossVerdict  -> condition type "ParamsReady" on Network

Author: GNPGuard Team
Date: 2026-10-19
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Union


class ParamSetReason(str, Enum):
    """Reason tokens for GKENetworkParamSet self and cloud validation."""
    READY = "GNPReady"
    CONFIG_INVALID = "GNPConfigInvalid"
    SECONDARY_RANGE_AND_DEVICE_MODE_UNSPECIFIED = "SecondaryRangeAndDeviceModeUnspecified"
    DEVICE_MODE_CANT_BE_USED_WITH_SECONDARY_RANGE = "DeviceModeCantBeUsedWithSecondaryRange"
    VPC_NOT_FOUND = "VPCNotFound"
    SUBNET_NOT_FOUND = "SubnetNotFound"
    SECONDARY_RANGE_NOT_FOUND = "SecondaryRangeNotFound"
    NETWORK_ATTACHMENT_INVALID = "NetworkAttachmentInvalid"
    DEVICE_MODE_CANT_USE_DEFAULT_VPC = "DeviceModeCantUseDefaultVPC"
    DEVICE_MODE_SUBNET_ALREADY_IN_USE = "DeviceModeSubnetAlreadyInUse"


class NetworkParamsReason(str, Enum):
    """Reason tokens for Network <-> GKENetworkParamSet cross validation."""
    PARAMS_READY = "GNPParamsReady"
    L3_SECONDARY_MISSING = "L3SecondaryMissing"
    NETWORK_ATTACHMENT_UNSUPPORTED = "NetworkAttachmentUnsupported"
    DEVICE_MODE_MISSING = "DeviceModeMissing"


class ConditionStatus(str, Enum):
    TRUE = "True"
    FALSE = "False"


# Condition types written to the owning resource's status
PARAMSET_READY_CONDITION = "Ready"
NETWORK_PARAMS_READY_CONDITION = "ParamsReady"


@dataclass(frozen=True)
class ParamSetVerdict:
    is_valid: bool
    reason: ParamSetReason = ParamSetReason.READY
    message: str = ""

    def __post_init__(self):
        if not isinstance(self.reason, ParamSetReason):
            raise TypeError(f"ParamSetVerdict reason must be a ParamSetReason, got {self.reason!r}")
        if not self.is_valid and self.reason is ParamSetReason.READY:
            raise ValueError("A failing ParamSetVerdict needs a failure reason.")

    @classmethod
    def ok(cls) -> "ParamSetVerdict":
        return cls(is_valid=True)

    @classmethod
    def fail(cls, reason: ParamSetReason, message: str) -> "ParamSetVerdict":
        return cls(is_valid=False, reason=reason, message=message)


@dataclass(frozen=True)
class NetworkCrossVerdict:
    is_valid: bool
    reason: NetworkParamsReason = NetworkParamsReason.PARAMS_READY
    message: str = ""

    def __post_init__(self):
        if not isinstance(self.reason, NetworkParamsReason):
            raise TypeError(f"NetworkCrossVerdict reason must be a NetworkParamsReason, got {self.reason!r}")
        if not self.is_valid and self.reason is NetworkParamsReason.PARAMS_READY:
            raise ValueError("A failing NetworkCrossVerdict needs a failure reason.")

    @classmethod
    def ok(cls) -> "NetworkCrossVerdict":
        return cls(is_valid=True)

    @classmethod
    def fail(cls, reason: NetworkParamsReason, message: str) -> "NetworkCrossVerdict":
        return cls(is_valid=False, reason=reason, message=message)


Verdict = Union[ParamSetVerdict, NetworkCrossVerdict]


@dataclass(frozen=True)
class Condition:
    """The status record persisted on the owning resource (metav1.Condition)."""
    type: str
    status: ConditionStatus
    reason: str
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "status": self.status.value,
            "reason": self.reason,
            "message": self.message,
        }


def to_condition(verdict: Verdict) -> Condition:
    """
    Projects a verdict onto its status condition.

    Success yields status True with the flavor's ready reason and no message;
    failure copies reason and message straight from the verdict.
    """
    if isinstance(verdict, ParamSetVerdict):
        cond_type, ready = PARAMSET_READY_CONDITION, ParamSetReason.READY
    elif isinstance(verdict, NetworkCrossVerdict):
        cond_type, ready = NETWORK_PARAMS_READY_CONDITION, NetworkParamsReason.PARAMS_READY
    else:
        raise TypeError(f"Unsupported verdict type: {type(verdict).__name__}")

    if verdict.is_valid:
        return Condition(type=cond_type, status=ConditionStatus.TRUE, reason=ready.value)

    return Condition(
        type=cond_type,
        status=ConditionStatus.FALSE,
        reason=verdict.reason.value,
        message=verdict.message,
    )
