import logging
from ipaddress import IPv4Address

from .errors import CommandExecutionError
from .readers import parse_link_routes
from .runner import CommandRunner


class RoutingTableManager:
    """Maintains the default route and on-link routes of a per-WAN routing table"""

    def __init__(self, runner: CommandRunner):
        self.logger = logging.getLogger(__name__)
        self.runner = runner

    def ensure_default_route(
        self, interface: str, table: int, gateway: IPv4Address
    ) -> None:
        """Create or overwrite the default route of `table`. Safe to repeat."""
        self.runner.run(
            [
                "ip", "route", "replace", "default",
                "via", str(gateway), "dev", interface, "table", str(int(table)),
            ]
        )
        self.logger.info(
            f"Table {table}: default via {gateway} dev {interface}"
        )

    def mirror_link_routes(self, interface: str, table: int) -> list[str]:
        """
        Copy the link-scope routes of `interface` from the main table into `table`
        so the gateway and on-link peers resolve when `table` is consulted.

        Listing failures propagate. Failures on individual routes are logged and
        skipped. Returns the prefixes that were mirrored.
        """
        listing = self.runner.run(
            ["ip", "-4", "route", "show", "dev", interface, "scope", "link"]
        )

        mirrored = []
        for route in parse_link_routes(listing.stdout):
            try:
                self.runner.run(
                    [
                        "ip", "route", "replace", route.prefix,
                        "dev", interface, "scope", "link", "table", str(int(table)),
                    ]
                )
            except CommandExecutionError as e:
                self.logger.warning(
                    f"Could not mirror {route.prefix} dev {interface} into table {table}: {e.stderr.strip()}"
                )
                continue
            mirrored.append(route.prefix)

        self.logger.info(
            f"Mirrored {len(mirrored)} link route(s) of {interface} into table {table}"
        )
        return mirrored
