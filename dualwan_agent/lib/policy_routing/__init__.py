"""
Policy Routing Module

This module keeps the Linux policy routing state of a dual-WAN gateway:
- Default gateway discovery for each WAN interface
- One routing table per WAN (default route plus mirrored link routes)
- Idempotent `ip rule` management
- Per-host overrides from the primary to the secondary WAN

Main components:
- InitializationSequence: one-shot convergence at startup
- SwitchCoordinator: per-host override state machine
- PolicyRuleManager: rule inspection, insertion and best-effort removal
- RoutingTableManager: table default routes and link route mirroring
- GatewayDiscovery: default gateway lookup
- SubprocessCommandRunner: runs `ip` commands

Usage:
    from dualwan_agent.lib.policy_routing import (
        InitializationSequence, PolicyRuleManager, SubprocessCommandRunner, SwitchCoordinator,
    )

    runner = SubprocessCommandRunner()
    InitializationSequence(runner, "eth0", "eth1", IPv4Network("10.40.0.0/20")).run()

    coordinator = SwitchCoordinator(
        PolicyRuleManager(runner), {Nic.WAN0: "eth0", Nic.WAN1: "eth1"}
    )
    coordinator.switch("10.40.0.5", "wan1")
"""

from .coordinator import HostMappings, SwitchCoordinator
from .domain import (
    CleanupOutcome,
    InitializationReport,
    Nic,
    RoutingTable,
    RulePriority,
    SwitchResult,
)
from .errors import (
    CommandExecutionError,
    DiscoveryError,
    PolicyRoutingError,
    ValidationError,
)
from .gateway import GatewayDiscovery
from .initialization import InitializationSequence
from .rules import PolicyRuleManager
from .runner import CommandRunner, SubprocessCommandRunner
from .tables import RoutingTableManager

__all__ = [
    "InitializationSequence",
    "SwitchCoordinator",
    "HostMappings",
    "PolicyRuleManager",
    "RoutingTableManager",
    "GatewayDiscovery",
    "CommandRunner",
    "SubprocessCommandRunner",
    "CleanupOutcome",
    "InitializationReport",
    "Nic",
    "RoutingTable",
    "RulePriority",
    "SwitchResult",
    "PolicyRoutingError",
    "ValidationError",
    "CommandExecutionError",
    "DiscoveryError",
]
