from __future__ import annotations

from ipaddress import IPv4Network

from pydantic import BaseModel, Field, field_validator

from dualwan_agent import constants


class GatewayInterfaces(BaseModel):
    wan0: str = Field(default=constants.DEFAULT_WAN0, description="Primary WAN device")
    wan1: str = Field(default=constants.DEFAULT_WAN1, description="Secondary WAN device")
    lan: str = Field(default=constants.DEFAULT_LAN, description="LAN device")

    @field_validator("wan0", "wan1", "lan")
    def not_blank(cls, v):  # noqa: N805
        if not v.strip():
            raise ValueError("interface name must not be empty")
        return v.strip()


class GatewayPolicy(BaseModel):
    lan_subnet: IPv4Network = Field(default=IPv4Network(constants.DEFAULT_LAN_SUBNET))

    @field_validator("lan_subnet", mode="before")
    def host_bits_allowed(cls, v):  # noqa: N805
        if isinstance(v, str):
            return IPv4Network(v, strict=False)
        return v


class GatewayServer(BaseModel):
    host: str = Field(default=constants.DEFAULT_HOST)
    port: int = Field(default=constants.DEFAULT_PORT, ge=1, le=65535)
    daemonize: bool = Field(default=False)
    log_file: str = Field(
        default=constants.DEFAULT_LOG_FILE,
        description="Log destination once detached from the terminal",
    )


class GatewayConfig(BaseModel):
    Interfaces: GatewayInterfaces = Field(default_factory=GatewayInterfaces)
    Policy: GatewayPolicy = Field(default_factory=GatewayPolicy)
    Server: GatewayServer = Field(default_factory=GatewayServer)
