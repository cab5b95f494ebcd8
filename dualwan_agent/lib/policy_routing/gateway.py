import logging
from ipaddress import IPv4Address

from .errors import DiscoveryError
from .readers import parse_default_routes
from .runner import CommandRunner


class GatewayDiscovery:
    """Finds the default gateway of an interface from the main routing table"""

    def __init__(self, runner: CommandRunner):
        self.logger = logging.getLogger(__name__)
        self.runner = runner

    def get_default_gateway(self, interface: str) -> IPv4Address:
        # Scoped query first; single path routes omit the device column there,
        # multipath routes still print a dev per next hop.
        scoped = self.runner.run(["ip", "route", "show", "default", "dev", interface])
        for route in parse_default_routes(scoped.stdout):
            gateway = route.gateway_for(interface)
            if gateway is not None:
                self.logger.debug(f"Found gateway {gateway} for {interface}")
                return gateway

        self.logger.debug(
            f"No scoped default route for {interface}, scanning all default routes"
        )
        unscoped = self.runner.run(["ip", "route", "show", "default"])
        for route in parse_default_routes(unscoped.stdout):
            if route.device is None and not route.nexthops:
                continue
            gateway = route.gateway_for(interface)
            if gateway is not None:
                self.logger.debug(
                    f"Found gateway {gateway} for {interface} in full listing"
                )
                return gateway

        raise DiscoveryError(interface)
