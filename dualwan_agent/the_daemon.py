import logging

import daemon
import uvicorn

from dualwan_agent.agent import create_app
from dualwan_agent.lib.configuration.gateway_config_file import load_config
from dualwan_agent.lib.configuration.schemas import GatewayConfig
from dualwan_agent.lib.logging_utils import create_file_handler, setup_logging

logger = logging.getLogger(__name__)


def serve(config: GatewayConfig):
    app = create_app(config)
    logger.info(
        f"Server listening on http://{config.Server.host}:{config.Server.port}"
    )
    uvicorn.run(app, host=config.Server.host, port=config.Server.port, log_config=None)


def daemon_context(config: GatewayConfig) -> daemon.DaemonContext:
    """
    Move logging to the configured file and build the detach context.

    DaemonContext closes every open descriptor and points the standard
    streams at /dev/null, so the log file's stream has to be preserved.
    """
    handler = create_file_handler(config.Server.log_file)
    setup_logging(level=logging.INFO, handlers=[handler])
    logger.info(f"Detaching, logging to {config.Server.log_file}")
    return daemon.DaemonContext(files_preserve=[handler.stream])


def main():
    setup_logging(level=logging.INFO)
    config = load_config()
    if config.Server.daemonize:
        with daemon_context(config):
            serve(config)
    else:
        serve(config)


if __name__ == "__main__":
    main()
