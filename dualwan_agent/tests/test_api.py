import pytest
from fastapi.testclient import TestClient

from dualwan_agent.agent import create_app
from dualwan_agent.lib.configuration.schemas import GatewayConfig
from dualwan_agent.lib.policy_routing import DiscoveryError
from dualwan_agent.tests.fakes import FakeKernel


def test_startup_installs_base_rule(client, kernel):
    assert kernel.rules_for("10.40.0.0/20") == [(2000, "10.40.0.0/20", "100")]


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["name"] == "dualwan_agent"


def test_switch_wan1(client, kernel):
    response = client.get("/switch", params={"ip": "10.40.0.3/20", "nic": "wan1"})

    assert response.status_code == 200
    assert response.json() == {
        "status": "success",
        "message": "Routed 10.40.0.3/32 to wan1 (eth1) via policy",
    }
    assert kernel.rules_for("10.40.0.3") == [(1000, "10.40.0.3/32", "200")]


def test_switch_then_revert_reports_wan0(client):
    assert client.get("/switch", params={"ip": "10.40.0.5", "nic": "wan1"}).status_code == 200
    assert client.get("/switch", params={"ip": "10.40.0.5", "nic": "wan0"}).status_code == 200

    response = client.get("/status")

    assert response.status_code == 200
    assert response.json() == {
        "mappings": {"10.40.0.5": "wan0"},
        "config": {"wan0": "eth0", "wan1": "eth1", "lan": "eth2"},
    }


@pytest.mark.parametrize(
    "params",
    [
        {"ip": "999.1.1.1", "nic": "wan1"},
        {"ip": "10.40.0.5", "nic": "wan2"},
        {"ip": "10.40.0.5"},
        {"nic": "wan1"},
    ],
)
def test_bad_request_leaves_mappings_unchanged(client, params):
    client.get("/switch", params={"ip": "10.40.0.7", "nic": "wan1"})

    response = client.get("/switch", params=params)

    assert response.status_code == 400
    assert response.headers["content-type"].startswith("text/plain")
    assert client.get("/status").json()["mappings"] == {"10.40.0.7": "wan1"}


def test_command_failure_is_500_with_stderr(client, kernel):
    kernel.fail_on(["ip", "rule", "add"], "RTNETLINK answers: Operation not permitted\n")

    response = client.get("/switch", params={"ip": "10.40.0.5", "nic": "wan1"})

    assert response.status_code == 500
    assert "Operation not permitted" in response.text
    assert "ip rule add from 10.40.0.5/32 lookup 200" in response.text
    assert client.get("/status").json()["mappings"] == {}


def test_rule_listing_failure_names_the_listing(client, kernel):
    kernel.fail_on(["ip", "rule", "show"], "Cannot open netlink socket: Permission denied\n")

    response = client.get("/switch", params={"ip": "10.40.0.5", "nic": "wan1"})

    assert response.status_code == 500
    assert response.text == (
        "Command failed (ip rule show): Cannot open netlink socket: Permission denied"
    )


def test_status_uses_configured_interfaces():
    config = GatewayConfig(Interfaces={"wan0": "ppp0", "wan1": "wwan0", "lan": "br-lan"})
    kernel = FakeKernel(
        gateways={"ppp0": "203.0.113.1", "wwan0": "198.51.100.1"},
        link_routes={},
    )

    with TestClient(create_app(config, runner=kernel)) as client:
        body = client.get("/status").json()

    assert body["config"] == {"wan0": "ppp0", "wan1": "wwan0", "lan": "br-lan"}


def test_failed_initialization_prevents_startup():
    kernel = FakeKernel(gateways={})
    app = create_app(GatewayConfig(), runner=kernel)

    with pytest.raises(DiscoveryError):
        with TestClient(app):
            pass
