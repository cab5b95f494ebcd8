"""
Pytest configuration and shared fixtures for dualwan-agent tests
"""
import logging

import pytest
from fastapi.testclient import TestClient

from dualwan_agent.agent import create_app
from dualwan_agent.lib.configuration.schemas import GatewayConfig
from dualwan_agent.lib.logging_utils import setup_logging
from dualwan_agent.lib.policy_routing import Nic, PolicyRuleManager, SwitchCoordinator
from dualwan_agent.tests.fakes import FakeKernel


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Setup logging for tests with appropriate levels"""
    setup_logging(level=logging.DEBUG)


@pytest.fixture
def kernel() -> FakeKernel:
    return FakeKernel()


@pytest.fixture
def gateway_config() -> GatewayConfig:
    return GatewayConfig()


@pytest.fixture
def coordinator(kernel) -> SwitchCoordinator:
    return SwitchCoordinator(
        PolicyRuleManager(kernel), {Nic.WAN0: "eth0", Nic.WAN1: "eth1"}
    )


@pytest.fixture
def client(kernel, gateway_config):
    """API client; entering it runs the startup initialization against `kernel`."""
    app = create_app(gateway_config, runner=kernel)
    with TestClient(app) as test_client:
        yield test_client
