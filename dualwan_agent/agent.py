import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from dualwan_agent.__version__ import __title__, __version__
from dualwan_agent.lib.configuration.schemas import GatewayConfig
from dualwan_agent.lib.policy_routing import (
    CommandExecutionError,
    CommandRunner,
    InitializationSequence,
    Nic,
    PolicyRoutingError,
    PolicyRuleManager,
    SubprocessCommandRunner,
    SwitchCoordinator,
    ValidationError,
)
from dualwan_agent.models.api_models import (
    AgentInfo,
    InterfaceConfig,
    StatusResponse,
    SwitchResponse,
)
from dualwan_agent.util_decorators import async_wrap
from dualwan_agent.utils import get_full_class_name

logger = logging.getLogger(__name__)


def create_app(
    config: GatewayConfig, runner: Optional[CommandRunner] = None
) -> FastAPI:
    """
    Build the API application.

    Initialization runs in the lifespan, before the server accepts requests. If
    it fails the exception propagates and the server never starts serving.
    """
    runner = runner if runner is not None else SubprocessCommandRunner()
    interfaces = config.Interfaces

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # One worker: every `ip` invocation is serialized behind it and the
        # event loop never blocks on a command.
        executor = ThreadPoolExecutor(1, thread_name_prefix="policy-routing")

        sequence = InitializationSequence(
            runner, interfaces.wan0, interfaces.wan1, config.Policy.lan_subnet
        )
        try:
            await async_wrap(sequence.run)(executor=executor)
        except PolicyRoutingError as e:
            logger.critical(f"Failed to initialize: {e}")
            executor.shutdown(wait=False)
            raise

        app.state.executor = executor
        app.state.coordinator = SwitchCoordinator(
            PolicyRuleManager(runner),
            {Nic.WAN0: interfaces.wan0, Nic.WAN1: interfaces.wan1},
        )
        logger.info(f"{__title__} {__version__} ready")

        try:
            yield
        finally:
            logger.info("Shutting down")
            # A hung command would block a waiting shutdown forever.
            executor.shutdown(wait=False)

    app = FastAPI(title=__title__, version=__version__, lifespan=lifespan)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return PlainTextResponse(str(exc), status_code=400)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        request: Request, exc: RequestValidationError
    ):
        missing = [".".join(str(p) for p in err["loc"][1:]) for err in exc.errors()]
        return PlainTextResponse(
            f"Missing or invalid query parameter(s): {', '.join(missing)}",
            status_code=400,
        )

    @app.exception_handler(CommandExecutionError)
    async def command_error_handler(request: Request, exc: CommandExecutionError):
        logger.error(f"{get_full_class_name(exc)}: {exc}")
        return PlainTextResponse(
            f"Command failed ({' '.join(exc.command)}): {exc.stderr.strip()}",
            status_code=500,
        )

    @app.get("/", response_model=AgentInfo)
    async def root():
        return AgentInfo(name=__title__, version=__version__)

    @app.get("/switch", response_model=SwitchResponse)
    async def switch(request: Request, ip: str, nic: str):
        coordinator: SwitchCoordinator = request.app.state.coordinator
        result = await async_wrap(coordinator.switch)(
            ip, nic, executor=request.app.state.executor
        )
        return SwitchResponse(message=result.message)

    @app.get("/status", response_model=StatusResponse)
    async def status(request: Request):
        coordinator: SwitchCoordinator = request.app.state.coordinator
        return StatusResponse(
            mappings=coordinator.status(),
            config=InterfaceConfig(
                wan0=interfaces.wan0, wan1=interfaces.wan1, lan=interfaces.lan
            ),
        )

    return app
