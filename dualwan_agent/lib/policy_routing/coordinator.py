import logging
import re
import threading
from ipaddress import AddressValueError, IPv4Address, IPv4Network
from typing import Dict, Optional

from .domain import Nic, RoutingTable, RulePriority, SwitchResult
from .errors import ValidationError
from .rules import PolicyRuleManager

IP_PATTERN = re.compile(r"^(\d+\.\d+\.\d+\.\d+)(/\d+)?$")


class HostMappings:
    """Host address -> nic currently carrying its egress. Lives in process memory only."""

    def __init__(self):
        self._lock = threading.Lock()
        self._mappings: Dict[str, str] = {}

    def set(self, ip: IPv4Address, nic: Nic) -> None:
        with self._lock:
            self._mappings[str(ip)] = nic.value

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._mappings)


def parse_nic(nic: str) -> Nic:
    try:
        return Nic(nic)
    except ValueError:
        raise ValidationError("nic must be 'wan0' or 'wan1'") from None


def parse_host(ip: str) -> IPv4Address:
    """Accept `a.b.c.d` or `a.b.c.d/n` and return the bare host address."""
    match = IP_PATTERN.fullmatch(ip)
    if not match:
        raise ValidationError(
            "Invalid IP format. Expected: IP or IP/subnet (e.g., 10.40.0.3 or 10.40.0.3/20)"
        )
    mask = match.group(2)
    if mask is not None and int(mask[1:]) > 32:
        raise ValidationError(f"Invalid subnet mask in {ip}")
    try:
        return IPv4Address(match.group(1))
    except AddressValueError:
        raise ValidationError(f"Invalid IPv4 address: {match.group(1)}") from None


class SwitchCoordinator:
    """
    Applies per-host WAN overrides.

    A host is either in the default state (no host rule, the LAN subnet rule
    sends it through the primary table) or overridden (a /32 rule at
    HOST_OVERRIDE priority sends it through the secondary table). Every switch
    clears host rules in both tables before applying the new state, so a host
    never holds more than one override binding.

    All mutations run under one lock: the kernel rule table cannot be updated
    atomically across several `ip` invocations, and two requests for the same
    host must not interleave their remove and add steps.
    """

    def __init__(
        self,
        rules: PolicyRuleManager,
        interfaces: Dict[Nic, str],
        mappings: Optional[HostMappings] = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.rules = rules
        self.interfaces = interfaces
        self.mappings = mappings if mappings is not None else HostMappings()
        self.lock = threading.Lock()

    def switch(self, ip: str, nic: str) -> SwitchResult:
        """
        Route host `ip` through `nic`.

        :raises ValidationError: `nic` or `ip` is malformed; nothing was changed.
        :raises CommandExecutionError: the override rule could not be added.
            Rules for the host may already have been removed; nothing is rolled back.
        """
        target_nic = parse_nic(nic)
        host = parse_host(ip)
        selector = IPv4Network(f"{host}/32")

        with self.lock:
            self.logger.debug(f"Switching {selector} to {target_nic.value}")
            for table in (RoutingTable.PRIMARY, RoutingTable.SECONDARY):
                self.rules.remove_rule(selector, table)

            interface = self.interfaces[target_nic]
            if target_nic is Nic.WAN1:
                self.rules.add_rule(
                    selector, RoutingTable.SECONDARY, RulePriority.HOST_OVERRIDE
                )
                message = f"Routed {selector} to wan1 ({interface}) via policy"
            else:
                message = f"Routed {selector} to wan0 ({interface}) via default policy"

            self.mappings.set(host, target_nic)

        self.logger.info(message)
        return SwitchResult(
            ip=host,
            selector=selector,
            nic=target_nic,
            interface=interface,
            message=message,
        )

    def status(self) -> Dict[str, str]:
        return self.mappings.snapshot()
