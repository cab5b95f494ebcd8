import typing as t
from enum import Enum, IntEnum
from ipaddress import IPv4Address, IPv4Network
from typing import Optional

from pydantic import BaseModel, Field


class RoutingTable(IntEnum):
    """Routing table ids owned by the agent"""

    PRIMARY = 100  # wan0
    SECONDARY = 200  # wan1


class RulePriority(IntEnum):
    """Rule priorities. Smaller values are evaluated first."""

    HOST_OVERRIDE = 1000
    LAN_DEFAULT = 2000


class Nic(str, Enum):
    """Logical WAN selectors accepted by the switch API"""

    WAN0 = "wan0"
    WAN1 = "wan1"


class CleanupOutcome(Enum):
    """Result of a best-effort delete"""

    APPLIED = "applied"
    ABSENT = "absent"  # nothing to delete, already in the desired state
    PERMISSION_DENIED = "permission_denied"
    FAILED = "failed"


# Fragments of iproute2 stderr that mean the object was not there to begin with.
_ABSENT_MARKERS = (
    "no such file or directory",
    "no such process",
    "cannot assign requested address",
    "cannot find device",
)
_PERMISSION_MARKERS = ("operation not permitted", "permission denied")


def classify_cleanup_failure(stderr: str, return_code: int) -> CleanupOutcome:
    """Sort a failed delete by what iproute2 reported.

    A negative return code means the command never ran (launch failure or
    signal), so its text says nothing about kernel state.
    """
    if return_code < 0:
        return CleanupOutcome.FAILED
    text = stderr.lower()
    if any(marker in text for marker in _ABSENT_MARKERS):
        return CleanupOutcome.ABSENT
    if any(marker in text for marker in _PERMISSION_MARKERS):
        return CleanupOutcome.PERMISSION_DENIED
    return CleanupOutcome.FAILED


class NextHop(BaseModel):
    """A `nexthop via <gw> dev <iface>` line of a multipath route"""

    gateway: Optional[IPv4Address] = Field(None, description="Next hop address")
    device: Optional[str] = Field(None, description="Output device")
    weight: Optional[int] = Field(None, description="ECMP weight")


class DefaultRoute(BaseModel):
    """One default route of `ip route show default`"""

    gateway: Optional[IPv4Address] = Field(None, description="Next hop address")
    device: Optional[str] = Field(
        None, description="Output device, absent when the query was scoped by dev"
    )
    metric: Optional[int] = Field(None, description="Route metric")
    nexthops: t.List[NextHop] = Field(
        default_factory=list, description="Multipath next hops, empty for a single path"
    )

    def gateway_for(self, interface: str) -> Optional[IPv4Address]:
        """Gateway reached through `interface`; a route printed without a device is taken as on it."""
        if self.gateway is not None and self.device in (None, interface):
            return self.gateway
        for hop in self.nexthops:
            if hop.gateway is not None and hop.device == interface:
                return hop.gateway
        return None


class RuleEntry(BaseModel):
    """One line of `ip rule show`"""

    priority: int = Field(..., description="Rule priority")
    selector: IPv4Network = Field(..., description="Source selector, 0.0.0.0/0 for 'all'")
    table: str = Field(..., description="Lookup table id or name")
    negated: bool = Field(False, description="Rule carries 'not'")

    def matches(self, selector: IPv4Network, table: t.Union[int, str]) -> bool:
        if isinstance(table, int):
            table = str(int(table))
        return not self.negated and self.selector == selector and self.table == table


class LinkRoute(BaseModel):
    """One line of `ip -4 route show dev <iface> scope link`"""

    prefix: str = Field(..., description="Destination as printed, e.g. 192.0.2.0/24")


class SwitchResult(BaseModel):
    ip: IPv4Address = Field(..., description="Bare host address")
    selector: IPv4Network = Field(..., description="Host selector used for the rule")
    nic: Nic
    interface: str = Field(..., description="Device behind the nic")
    message: str


class InitializationReport(BaseModel):
    gateways: dict[str, IPv4Address] = Field(default_factory=dict)
    mirrored_routes: dict[int, list[str]] = Field(default_factory=dict)
    base_rule_added: bool = False
