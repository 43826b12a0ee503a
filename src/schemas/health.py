from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str


class ServiceInfo(BaseModel):
    name: str
    version: str
    endpoints: dict[str, str]
