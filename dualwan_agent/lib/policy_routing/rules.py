import logging
from ipaddress import IPv4Network
from typing import Union

from .domain import CleanupOutcome, RuleEntry, classify_cleanup_failure
from .errors import CommandExecutionError
from .readers import parse_rules, to_selector
from .runner import CommandRunner

Selector = Union[str, IPv4Network]


class PolicyRuleManager:
    """Inspects, adds and removes source selector rules (`ip rule`)"""

    def __init__(self, runner: CommandRunner):
        self.logger = logging.getLogger(__name__)
        self.runner = runner

    def list_rules(self) -> list[RuleEntry]:
        return parse_rules(self.runner.run(["ip", "rule", "show"]).stdout)

    def rule_exists(self, selector: Selector, table: int) -> bool:
        """True if a `from <selector> lookup <table>` rule is installed."""
        network = to_selector(str(selector))
        return any(rule.matches(network, table) for rule in self.list_rules())

    def add_rule(self, selector: Selector, table: int, priority: int) -> bool:
        """Install the rule unless it already exists. Returns True if installed."""
        if self.rule_exists(selector, table):
            self.logger.debug(f"Rule from {selector} lookup {table} already present")
            return False

        self.runner.run(
            [
                "ip", "rule", "add", "from", str(selector),
                "lookup", str(int(table)), "priority", str(int(priority)),
            ]
        )
        self.logger.info(f"Added rule {priority}: from {selector} lookup {table}")
        return True

    def remove_rule(self, selector: Selector, table: int) -> CleanupOutcome:
        """Best-effort delete. Never raises; the outcome says what happened."""
        try:
            self.runner.run(
                ["ip", "rule", "del", "from", str(selector), "lookup", str(int(table))]
            )
        except CommandExecutionError as e:
            outcome = classify_cleanup_failure(e.stderr, e.return_code)
            if outcome is CleanupOutcome.ABSENT:
                self.logger.debug(f"No rule from {selector} lookup {table} to remove")
            else:
                self.logger.warning(
                    f"Could not remove rule from {selector} lookup {table} "
                    f"({outcome.value}): {e.stderr.strip()}"
                )
            return outcome

        self.logger.info(f"Removed rule from {selector} lookup {table}")
        return CleanupOutcome.APPLIED
