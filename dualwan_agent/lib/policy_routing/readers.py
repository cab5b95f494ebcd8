"""
Readers for iproute2 text output.

Each reader takes the stdout of one `ip` invocation and returns typed entries.
Nothing here runs commands, so every reader can be checked against captured
fixture text.
"""
import re
from ipaddress import AddressValueError, IPv4Address, IPv4Network
from typing import Optional

from .domain import DefaultRoute, LinkRoute, NextHop, RuleEntry

IPV4_PREFIX = r"\d+\.\d+\.\d+\.\d+(?:/\d+)?"

_rule_line = re.compile(r"^\s*(\d+):\s+(.*)$")
_link_line = re.compile(rf"^({IPV4_PREFIX})\b")


def _keyword_values(tokens: list[str]) -> dict[str, str]:
    """Map `keyword value` pairs, first occurrence wins."""
    values: dict[str, str] = {}
    for key, value in zip(tokens, tokens[1:]):
        values.setdefault(key, value)
    return values


def to_selector(value: str) -> IPv4Network:
    """Normalize a rule selector: 'all' and bare addresses become CIDRs."""
    if value == "all":
        return IPv4Network("0.0.0.0/0")
    return IPv4Network(value, strict=False)


def _gateway(values: dict[str, str]) -> Optional[IPv4Address]:
    if "via" not in values:
        return None
    try:
        return IPv4Address(values["via"])
    except AddressValueError:
        # 'via inet6 ...' and friends
        return None


def _number(value: Optional[str]) -> Optional[int]:
    return int(value) if value and value.isdigit() else None


def parse_default_routes(text: str) -> list[DefaultRoute]:
    """
    Read `ip route show default [dev <iface>]`.

    Scoped by device:
        default via 192.0.2.1 proto dhcp src 192.0.2.10 metric 100
    Unscoped:
        default via 192.0.2.1 dev eth0 proto dhcp src 192.0.2.10 metric 100
        default via 198.51.100.1 dev eth1 proto static metric 200
    Multipath, next hops on indented continuation lines:
        default proto static metric 100
                nexthop via 192.0.2.1 dev eth0 weight 1
                nexthop via 198.51.100.1 dev eth1 weight 1
    """
    routes: list[DefaultRoute] = []
    current: Optional[DefaultRoute] = None
    for line in text.splitlines():
        tokens = line.split()
        if not tokens:
            continue
        if tokens[0] == "nexthop":
            if current is not None:
                values = _keyword_values(tokens[1:])
                current.nexthops.append(
                    NextHop(
                        gateway=_gateway(values),
                        device=values.get("dev"),
                        weight=_number(values.get("weight")),
                    )
                )
            continue
        if tokens[0] != "default":
            current = None
            continue

        values = _keyword_values(tokens[1:])
        current = DefaultRoute(
            gateway=_gateway(values),
            device=values.get("dev"),
            metric=_number(values.get("metric")),
        )
        routes.append(current)
    return routes


def parse_rules(text: str) -> list[RuleEntry]:
    """
    Read `ip rule show`.

        0:      from all lookup local
        1000:   from 10.40.0.5 lookup 200
        2000:   from 10.40.0.0/20 lookup 100
        32766:  from all lookup main
    """
    rules = []
    for line in text.splitlines():
        match = _rule_line.match(line)
        if not match:
            continue
        tokens = match.group(2).split()
        values = _keyword_values(tokens)

        table = values.get("lookup") or values.get("table")
        source = values.get("from")
        if table is None or source is None:
            # goto/nop/blackhole style rules have no lookup table
            continue
        try:
            selector = to_selector(source)
        except ValueError:
            continue

        rules.append(
            RuleEntry(
                priority=int(match.group(1)),
                selector=selector,
                table=table,
                negated=bool(tokens) and tokens[0] == "not",
            )
        )
    return rules


def parse_link_routes(text: str) -> list[LinkRoute]:
    """
    Read `ip -4 route show dev <iface> scope link`.

        192.0.2.0/24 proto kernel src 192.0.2.10
        198.18.0.7 proto static
    """
    routes = []
    for line in text.splitlines():
        match = _link_line.match(line.strip())
        if match:
            routes.append(LinkRoute(prefix=match.group(1)))
    return routes