from pydantic import BaseModel, ConfigDict


class ScriptInfo(BaseModel):
    name: str
    description: str | None = None
    path: str
    packages: list[str]
    url: str


class ErrorResponse(BaseModel):
    error: str
    available: list[str] = []


class RegistryFileEntry(BaseModel):
    model_config = ConfigDict(strict=True)

    # Missing path and empty packages load fine; requests for them answer 500
    path: str = ""
    packages: list[str] = []
    description: str | None = None
