import logging
import os
from typing import Mapping, Optional

from pydantic import ValidationError

from dualwan_agent import constants
from dualwan_agent.lib.configuration.config_file import ConfigFile
from dualwan_agent.lib.configuration.schemas import GatewayConfig

logger = logging.getLogger(__name__)

# Environment variable -> (section, key). Environment wins over the file.
ENV_OVERRIDES = {
    "WAN0": ("Interfaces", "wan0"),
    "WAN1": ("Interfaces", "wan1"),
    "LAN": ("Interfaces", "lan"),
    "LAN_SUBNET": ("Policy", "lan_subnet"),
    "DUALWAN_HOST": ("Server", "host"),
    "DUALWAN_PORT": ("Server", "port"),
    "DUALWAN_DAEMONIZE": ("Server", "daemonize"),
    "DUALWAN_LOG_FILE": ("Server", "log_file"),
}


class GatewayConfigFile(ConfigFile):
    def __init__(self, config_file: Optional[str] = None):
        super().__init__(
            config_file or constants.CONFIG_FILE,
            defaults=GatewayConfig().model_dump(mode="json"),
        )

    def load_or_create_defaults(self, allow_empty: bool = False):  # type: ignore[override]
        super().load_or_create_defaults(allow_empty=allow_empty)
        # Validate and normalize with schema; fall back to defaults on error
        try:
            self.data = GatewayConfig(**self.data).model_dump(mode="json")
        except (ValidationError, TypeError) as e:
            logger.warning(f"Invalid config in {self.config_file}, using defaults: {e}")
            self.create_defaults()


def load_config(
    config_file: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> GatewayConfig:
    """Read the config file (if any) and apply environment overrides. Called once at startup."""
    environ = os.environ if environ is None else environ

    config_file_obj = GatewayConfigFile(config_file)
    config_file_obj.load_or_create_defaults()
    data = config_file_obj.data

    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value is not None and value != "":
            data.setdefault(section, {})[key] = value

    # Bad environment values are an operator error; let them surface.
    config = GatewayConfig(**data)
    logger.info("Configuration:")
    logger.info(f"  wan0: {config.Interfaces.wan0}")
    logger.info(f"  wan1: {config.Interfaces.wan1}")
    logger.info(f"  lan: {config.Interfaces.lan}")
    logger.info(f"  lan subnet: {config.Policy.lan_subnet}")
    return config
