import logging
from ipaddress import IPv4Network

from .domain import (
    CleanupOutcome,
    InitializationReport,
    RoutingTable,
    RulePriority,
    classify_cleanup_failure,
)
from .errors import CommandExecutionError
from .gateway import GatewayDiscovery
from .rules import PolicyRuleManager
from .runner import CommandRunner
from .tables import RoutingTableManager


class InitializationSequence:
    """
    Converges the gateway to its default policy before the API is served:
    one routing table per WAN, and the whole LAN subnet looked up in the
    primary table.

    Every step is idempotent, so running it against an already converged
    system changes nothing. Any error other than the address cleanup aborts
    startup.
    """

    def __init__(
        self,
        runner: CommandRunner,
        wan0: str,
        wan1: str,
        lan_subnet: IPv4Network,
    ):
        self.logger = logging.getLogger(__name__)
        self.runner = runner
        self.wan0 = wan0
        self.wan1 = wan1
        self.lan_subnet = lan_subnet

        self.gateways = GatewayDiscovery(runner)
        self.tables = RoutingTableManager(runner)
        self.rules = PolicyRuleManager(runner)

    def run(self) -> InitializationReport:
        self.logger.info(
            f"Initializing policy routing: {self.lan_subnet} -> wan0 ({self.wan0})"
        )
        report = InitializationReport()
        wans = ((self.wan0, RoutingTable.PRIMARY), (self.wan1, RoutingTable.SECONDARY))

        for interface, _ in wans:
            self.release_address(interface)

        # Discover both gateways before touching any table.
        for interface, _ in wans:
            report.gateways[interface] = self.gateways.get_default_gateway(interface)

        for interface, table in wans:
            self.tables.ensure_default_route(
                interface, table, report.gateways[interface]
            )

        for interface, table in wans:
            report.mirrored_routes[int(table)] = self.tables.mirror_link_routes(
                interface, table
            )

        report.base_rule_added = self.rules.add_rule(
            self.lan_subnet, RoutingTable.PRIMARY, RulePriority.LAN_DEFAULT
        )

        self.logger.info(
            f"Policy ready: {self.lan_subnet} uses table {int(RoutingTable.PRIMARY)}, "
            f"specific hosts can be overridden to table {int(RoutingTable.SECONDARY)}"
        )
        return report

    def release_address(self, interface: str) -> CleanupOutcome:
        """Drop a stray assignment of the LAN subnet from a WAN interface, best-effort."""
        try:
            self.runner.run(["ip", "addr", "del", str(self.lan_subnet), "dev", interface])
        except CommandExecutionError as e:
            outcome = classify_cleanup_failure(e.stderr, e.return_code)
            log = (
                self.logger.debug
                if outcome is CleanupOutcome.ABSENT
                else self.logger.warning
            )
            log(
                f"Address cleanup of {self.lan_subnet} on {interface} skipped "
                f"({outcome.value}): {e.stderr.strip()}"
            )
            return outcome

        self.logger.warning(f"Removed stray address {self.lan_subnet} from {interface}")
        return CleanupOutcome.APPLIED
