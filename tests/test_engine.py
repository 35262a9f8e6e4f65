"""
GNPGUARD ENGINE TESTS
---------------------
End-to-end flow over a snapshot: every outcome becomes a condition, except
transport failures, which leave the status untouched.
"""

from conftest import make_params
from gnpguard.cluster.store import ParamSetStore
from gnpguard.core.conditions import ConditionStatus
from gnpguard.core.engine import ValidationEngine, audit, generate_summary, needs_resync
from gnpguard.core.models import NODE_POOL_POD_RANGE_LABEL, NetworkResource, NodeInfo
from gnpguard.loader.manifests import ManifestBundle

ATTACHMENT = "projects/p1/regions/us-central1/networkAttachments/na1"


def _engine(cloud, *params):
    return ValidationEngine(cloud, ParamSetStore(params))


def test_ready_params_report_pod_cidrs(cloud):
    params = make_params("pods", vpc="vpc-a", subnet="subnet-a", ranges=["pods-a2", "pods-a"])
    report = _engine(cloud, params).evaluate_params(params)
    assert report.is_valid
    assert report.condition.status is ConditionStatus.TRUE
    assert report.condition.reason == "GNPReady"
    assert report.pod_cidrs == ["10.9.0.0/16", "10.8.0.0/16"]


def test_structural_failure_skips_cloud(cloud):
    params = make_params("bad", vpc="vpc-a")
    report = _engine(cloud, params).evaluate_params(params)
    assert report.condition.reason == "GNPConfigInvalid"
    assert cloud.calls == []


def test_attachment_mode_only_checks_format(cloud):
    good = make_params("att", attachment=ATTACHMENT)
    bad = make_params("att-bad", attachment="projects/p1/networkAttachments/na1")
    engine = _engine(cloud, good, bad)

    assert engine.evaluate_params(good).is_valid
    assert engine.evaluate_params(bad).condition.reason == "NetworkAttachmentInvalid"
    assert cloud.calls == []


def test_missing_subnet_is_reported(cloud):
    params = make_params("p", vpc="vpc-a", subnet="ghost", ranges=["pods-a"])
    report = _engine(cloud, params).evaluate_params(params)
    assert report.condition.reason == "SubnetNotFound"
    assert report.condition.status is ConditionStatus.FALSE


def test_transport_error_leaves_no_condition(cloud):
    params = make_params("p", vpc="vpc-a", subnet="subnet-a", ranges=["pods-a"])
    cloud.fail_with = ConnectionError("connection refused")
    report = _engine(cloud, params).evaluate_params(params)
    assert report.condition is None
    assert report.verdict is None
    assert "connection refused" in report.transport_error
    assert not report.is_valid


def test_device_mode_conflict_through_engine(cloud):
    x = make_params("x", vpc="vpc-b", subnet="s1", device_mode="NetDevice", created_offset=0)
    y = make_params("y", vpc="vpc-b", subnet="s1", device_mode="NetDevice", created_offset=30)
    engine = _engine(cloud, x, y)
    assert engine.evaluate_params(x).is_valid
    assert engine.evaluate_params(y).condition.reason == "DeviceModeSubnetAlreadyInUse"


def test_evaluate_network(cloud):
    dev = make_params("dev", vpc="vpc-b", subnet="s1", device_mode="NetDevice")
    pods = make_params("pods", vpc="vpc-a", subnet="subnet-a", ranges=["pods-a"])
    engine = _engine(cloud, dev, pods)

    ok = engine.evaluate_network(NetworkResource(name="dev-net", type="Device", params_ref="dev"))
    assert ok.condition.type == "ParamsReady"
    assert ok.condition.reason == "GNPParamsReady"

    bad = engine.evaluate_network(NetworkResource(name="d2", type="Device", params_ref="pods"))
    assert bad.condition.reason == "DeviceModeMissing"

    unref = engine.evaluate_network(NetworkResource(name="plain", type="L3"))
    assert unref.skipped and unref.condition is None

    dangling = engine.evaluate_network(NetworkResource(name="d3", type="L3", params_ref="nope"))
    assert "not found" in dangling.skipped


def test_needs_resync():
    base = make_params(vpc="vpc-a", subnet="subnet-a", ranges=["a", "b"])
    assert not needs_resync(base, make_params(vpc="vpc-a", subnet="subnet-a", ranges=["b", "a"]))
    assert needs_resync(base, make_params(vpc="vpc-a", subnet="subnet-a", ranges=["a"]))
    assert needs_resync(base, make_params(vpc="vpc-a", subnet="subnet-b", ranges=["a", "b"]))
    assert needs_resync(base, make_params(vpc="vpc-a", subnet="subnet-a", ranges=["a", "b"], device_mode="X"))


def test_audit_bundle_and_summary(cloud):
    bundle = ManifestBundle(
        params=[
            make_params("default", vpc="default", subnet="default", ranges=["pods-default"]),
            make_params("dev", vpc="vpc-b", subnet="s1", device_mode="NetDevice"),
            make_params("broken", vpc="vpc-a"),
        ],
        networks=[
            NetworkResource(name="dev-net", type="Device", params_ref="dev"),
            NetworkResource(name="l3-net", type="L3", params_ref="dev"),
            NetworkResource(name="loose", type="L3"),
        ],
        nodes=[
            NodeInfo(name="node-a", labels={NODE_POOL_POD_RANGE_LABEL: "pods-default"}),
            NodeInfo(name="node-b", labels={NODE_POOL_POD_RANGE_LABEL: "pods-extra"}),
        ],
    )
    report = ValidationEngine.from_bundle(cloud, bundle).audit_bundle(bundle)

    assert [r.name for r in report.params] == ["broken", "default", "dev"]
    assert report.non_default_nodes == ["node-b"]

    summary = generate_summary(report)
    assert summary["param_sets"] == 3
    assert summary["params_ready"] == 2
    assert summary["params_invalid"] == 1
    assert summary["networks_ready"] == 1
    assert summary["networks_invalid"] == 1   # L3 + vpc pair without ranges
    assert summary["networks_skipped"] == 1
    assert summary["transport_errors"] == 0


def test_audit_from_directory(tmp_path, cloud):
    (tmp_path / "gnp.yaml").write_text(
        "apiVersion: networking.gke.io/v1\n"
        "kind: GKENetworkParamSet\n"
        "metadata:\n"
        "  name: pods\n"
        "spec:\n"
        "  vpc: vpc-a\n"
        "  vpcSubnet: subnet-a\n"
        "  podIPv4Ranges:\n"
        "    rangeNames: [pods-a]\n"
    )
    report = audit(tmp_path, cloud)
    assert len(report.params) == 1
    assert report.params[0].is_valid
    assert report.params[0].pod_cidrs == ["10.8.0.0/16"]
