import os

RUNTIME_ENV = os.environ.get("RUNTIME_ENV", "production")
IS_DEV = RUNTIME_ENV == "development"

CONFIG_DIR = "/etc/dualwan-agent"
CONFIG_FILE = os.environ.get("DUALWAN_CONFIG", os.path.join(CONFIG_DIR, "config.toml"))

DEFAULT_WAN0 = "eth0"
DEFAULT_WAN1 = "eth1"
DEFAULT_LAN = "eth2"
DEFAULT_LAN_SUBNET = "10.40.0.0/20"

# Loopback only, the API carries no authentication.
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 32599
DEFAULT_LOG_FILE = "/var/log/dualwan-agent.log"
