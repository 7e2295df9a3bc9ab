import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from app.registry import build_registry
from scripts._base import ScriptEntry

PROTECT_BRANCHES = ScriptEntry(
    name="protect-branches",
    path="protect-branches.sh",
    packages=("gh", "parallel", "jq"),
    description="Protect main/master branches in all public repositories",
)


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def registry():
    return build_registry(
        [
            PROTECT_BRANCHES,
            ScriptEntry(name="hello_world", path="tools/hello.sh", packages=["cowsay"]),
        ]
    )


@pytest.fixture
def client(settings, registry):
    with TestClient(create_app(settings, registry)) as c:
        yield c
