"""
GNPGUARD CONDITION PROJECTION TESTS
-----------------------------------
Verdict -> Condition must be pure and fully populated for both flavors.
"""

import pytest

from gnpguard.core.conditions import (
    Condition,
    ConditionStatus,
    NETWORK_PARAMS_READY_CONDITION,
    NetworkCrossVerdict,
    NetworkParamsReason,
    PARAMSET_READY_CONDITION,
    ParamSetReason,
    ParamSetVerdict,
    to_condition,
)


def test_paramset_success_condition():
    cond = to_condition(ParamSetVerdict.ok())
    assert cond == Condition(type="Ready", status=ConditionStatus.TRUE, reason="GNPReady", message="")


def test_paramset_failure_condition_copies_reason_and_message():
    verdict = ParamSetVerdict.fail(ParamSetReason.VPC_NOT_FOUND, "VPC: vpc-x not found")
    cond = to_condition(verdict)
    assert cond.type == PARAMSET_READY_CONDITION
    assert cond.status is ConditionStatus.FALSE
    assert cond.reason == "VPCNotFound"
    assert cond.message == "VPC: vpc-x not found"


def test_network_conditions():
    assert to_condition(NetworkCrossVerdict.ok()) == Condition(
        type=NETWORK_PARAMS_READY_CONDITION, status=ConditionStatus.TRUE, reason="GNPParamsReady")

    cond = to_condition(NetworkCrossVerdict.fail(NetworkParamsReason.DEVICE_MODE_MISSING, "need device mode"))
    assert (cond.type, cond.status, cond.reason) == ("ParamsReady", ConditionStatus.FALSE, "DeviceModeMissing")


def test_projection_is_deterministic():
    verdict = ParamSetVerdict.fail(ParamSetReason.CONFIG_INVALID, "bad")
    assert to_condition(verdict) == to_condition(verdict)
    assert to_condition(ParamSetVerdict.ok()) == to_condition(ParamSetVerdict.ok())


def test_every_reason_projects():
    for reason in ParamSetReason:
        if reason is ParamSetReason.READY:
            continue
        assert to_condition(ParamSetVerdict.fail(reason, "m")).reason == reason.value
    for reason in NetworkParamsReason:
        if reason is NetworkParamsReason.PARAMS_READY:
            continue
        assert to_condition(NetworkCrossVerdict.fail(reason, "m")).reason == reason.value


def test_verdict_flavors_do_not_mix():
    with pytest.raises(TypeError):
        ParamSetVerdict.fail(NetworkParamsReason.DEVICE_MODE_MISSING, "wrong flavor")
    with pytest.raises(TypeError):
        NetworkCrossVerdict.fail(ParamSetReason.VPC_NOT_FOUND, "wrong flavor")
    with pytest.raises(ValueError):
        ParamSetVerdict(is_valid=False)


def test_unknown_verdict_type_is_rejected():
    with pytest.raises(TypeError):
        to_condition(object())


def test_condition_to_dict():
    cond = to_condition(ParamSetVerdict.fail(ParamSetReason.SUBNET_NOT_FOUND, "subnet not specified"))
    assert cond.to_dict() == {
        "type": "Ready",
        "status": "False",
        "reason": "SubnetNotFound",
        "message": "subnet not specified",
    }
