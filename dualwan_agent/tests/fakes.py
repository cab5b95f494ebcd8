import threading
import time
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from dualwan_agent.lib.policy_routing.errors import CommandExecutionError
from dualwan_agent.models.command_result import CommandResult

NO_SUCH_FILE = "RTNETLINK answers: No such file or directory\n"
FILE_EXISTS = "RTNETLINK answers: File exists\n"
CANNOT_ASSIGN = "RTNETLINK answers: Cannot assign requested address\n"

DEFAULT_RULES = [(0, "all", "local"), (32766, "all", "main"), (32767, "all", "default")]


def _host(selector: str) -> str:
    """The kernel prints /32 selectors as bare addresses."""
    return selector[:-3] if selector.endswith("/32") else selector


def _normalize(selector: str) -> str:
    return selector if "/" in selector or selector == "all" else f"{selector}/32"


class FakeKernel:
    """
    In-memory stand-in for the `ip` command, usable as a CommandRunner.

    Keeps the rule list and per-table routes, answers listings from that state
    and fails the way iproute2 does (File exists, No such file or directory).
    Every call is recorded as (thread ident, command) in `calls`.
    """

    def __init__(
        self,
        gateways: Optional[Dict[str, str]] = None,
        link_routes: Optional[Dict[str, List[str]]] = None,
        scoped_default_hidden: Iterable[str] = (),
        delay: float = 0.0,
    ):
        self.gateways = (
            gateways
            if gateways is not None
            else {"eth0": "192.0.2.1", "eth1": "198.51.100.1"}
        )
        self.link_routes = (
            link_routes
            if link_routes is not None
            else {"eth0": ["192.0.2.0/24"], "eth1": ["198.51.100.0/24", "198.18.0.7"]}
        )
        # Interfaces whose default route only shows up in the unscoped listing.
        self.scoped_default_hidden = set(scoped_default_hidden)
        self.delay = delay

        self.rules: List[Tuple[int, str, str]] = list(DEFAULT_RULES)
        self.tables: Dict[str, Dict[str, str]] = defaultdict(dict)
        self.addresses: Dict[str, set] = defaultdict(set)
        self.calls: List[Tuple[int, Tuple[str, ...]]] = []
        self.failures: List[Tuple[Tuple[str, ...], str, int]] = []
        self._lock = threading.Lock()

    # -- test helpers --------------------------------------------------------

    def fail_on(self, prefix: Sequence[str], stderr: str, return_code: int = 2):
        """Make every command starting with `prefix` fail."""
        self.failures.append((tuple(prefix), stderr, return_code))

    def commands(self) -> List[Tuple[str, ...]]:
        return [cmd for _, cmd in self.calls]

    def rules_for(self, selector: str, table: Optional[str] = None):
        selector = _normalize(selector)
        return [
            rule
            for rule in self.rules
            if rule[1] == selector and (table is None or rule[2] == str(table))
        ]

    def host_rules(self, table: str):
        return [rule for rule in self.rules if rule[1].endswith("/32") and rule[2] == str(table)]

    # -- CommandRunner -------------------------------------------------------

    def run(self, cmd: Sequence[str]) -> CommandResult:
        cmd = tuple(cmd)
        self.calls.append((threading.get_ident(), cmd))
        if self.delay:
            time.sleep(self.delay)

        for prefix, stderr, return_code in self.failures:
            if cmd[: len(prefix)] == prefix:
                raise CommandExecutionError(stderr, return_code, cmd)

        with self._lock:
            stdout = self._dispatch(cmd)
        return CommandResult(stdout, "", 0, cmd)

    def _fail(self, cmd, stderr: str, return_code: int = 2):
        raise CommandExecutionError(stderr, return_code, cmd)

    def _dispatch(self, cmd: Tuple[str, ...]) -> str:
        args = list(cmd[1:])

        if args[:3] == ["route", "show", "default"]:
            if len(args) == 5 and args[3] == "dev":
                iface = args[4]
                if iface in self.gateways and iface not in self.scoped_default_hidden:
                    return f"default via {self.gateways[iface]} proto dhcp metric 100 \n"
                return ""
            return "".join(
                f"default via {gw} dev {iface} proto static metric {100 * (n + 1)} \n"
                for n, (iface, gw) in enumerate(self.gateways.items())
            )

        if args[:3] == ["route", "replace", "default"]:
            # route replace default via <gw> dev <iface> table <t>
            self.tables[args[8]]["default"] = f"default via {args[4]} dev {args[6]}"
            return ""

        if args[:4] == ["-4", "route", "show", "dev"]:
            return "".join(
                f"{prefix} proto kernel src 192.0.2.10 \n"
                for prefix in self.link_routes.get(args[4], [])
            )

        if args[:2] == ["route", "replace"]:
            # route replace <prefix> dev <iface> scope link table <t>
            self.tables[args[8]][args[2]] = f"{args[2]} dev {args[4]} scope link"
            return ""

        if args == ["rule", "show"]:
            return "".join(
                f"{prio}:\tfrom {_host(sel)} lookup {table} \n"
                for prio, sel, table in sorted(self.rules, key=lambda r: r[0])
            )

        if args[:2] == ["rule", "add"]:
            # rule add from <sel> lookup <t> priority <p>
            rule = (int(args[7]), _normalize(args[3]), args[5])
            if rule in self.rules:
                self._fail(cmd, FILE_EXISTS)
            self.rules.append(rule)
            return ""

        if args[:2] == ["rule", "del"]:
            # rule del from <sel> lookup <t>
            selector, table = _normalize(args[3]), args[5]
            for rule in self.rules:
                if rule[1] == selector and rule[2] == table:
                    self.rules.remove(rule)
                    return ""
            self._fail(cmd, NO_SUCH_FILE)

        if args[:2] == ["addr", "del"]:
            # addr del <cidr> dev <iface>
            if args[2] in self.addresses[args[4]]:
                self.addresses[args[4]].discard(args[2])
                return ""
            self._fail(cmd, CANNOT_ASSIGN)

        self._fail(cmd, f"Unknown command: {' '.join(cmd)}\n", 255)
