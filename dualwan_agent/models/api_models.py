from pydantic import BaseModel, Field


class SwitchResponse(BaseModel):
    status: str = Field("success")
    message: str


class InterfaceConfig(BaseModel):
    wan0: str
    wan1: str
    lan: str


class StatusResponse(BaseModel):
    mappings: dict[str, str] = Field(
        default_factory=dict, description="Host address -> nic"
    )
    config: InterfaceConfig


class AgentInfo(BaseModel):
    name: str
    version: str
