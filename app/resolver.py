"""Turn a requested path into the response sent back to the client.

Every outcome, including errors, is a ScriptResponse value; nothing is raised
past `resolve`. Bodies are plain text: clients pipe the response straight
into bash.
"""

import logging
from dataclasses import dataclass, field

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from app.config import TEMPLATES_DIR, Settings
from app.registry import Registry
from scripts._base import ScriptEntry

logger = logging.getLogger(__name__)

SHELL_MEDIA_TYPE = "text/x-shellscript"
TEXT_MEDIA_TYPE = "text/plain"
NO_CACHE = {"Cache-Control": "no-cache"}

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=False,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
)


@dataclass(frozen=True)
class ScriptResponse:
    body: str
    status: int = 200
    media_type: str = TEXT_MEDIA_TYPE
    headers: dict[str, str] = field(default_factory=lambda: dict(NO_CACHE))


@dataclass(frozen=True)
class Listing(ScriptResponse):
    pass


@dataclass(frozen=True)
class Found(ScriptResponse):
    media_type: str = SHELL_MEDIA_TYPE


@dataclass(frozen=True)
class InvalidName(ScriptResponse):
    status: int = 400


@dataclass(frozen=True)
class NotFound(ScriptResponse):
    status: int = 404


@dataclass(frozen=True)
class InternalError(ScriptResponse):
    status: int = 500


def normalize_name(raw_path: str) -> str:
    """Strip one leading slash and lowercase the rest."""
    if raw_path.startswith("/"):
        raw_path = raw_path[1:]
    return raw_path.lower()


def is_valid_name(script_name: str) -> bool:
    return "/" not in script_name and "." not in script_name


def script_url(entry: ScriptEntry, settings: Settings) -> str:
    return f"{settings.raw_base_url}/{entry.path.lstrip('/')}"


def render_listing(registry: Registry, settings: Settings) -> str:
    return _env.get_template("listing.txt.j2").render(
        scripts=list(registry.items()),
        site_url=settings.site_url,
    )


def render_wrapper(entry: ScriptEntry, settings: Settings) -> str:
    return _env.get_template("nix-wrapper.sh.j2").render(
        packages=entry.packages,
        script_url=script_url(entry, settings),
        connectivity_check_url=settings.connectivity_check_url,
    )


def not_found_message(script_name: str, registry: Registry) -> str:
    available = "\n".join(registry.names())
    return f"Script '{script_name}' not found.\n\nAvailable scripts:\n{available}"


def resolve(raw_path: str, registry: Registry, settings: Settings) -> ScriptResponse:
    script_name = normalize_name(raw_path)

    try:
        if not script_name:
            return Listing(
                body=render_listing(registry, settings),
                headers={"Cache-Control": f"public, max-age={settings.index_max_age}"},
            )

        if not is_valid_name(script_name):
            logger.info("Rejected invalid script name %r", script_name)
            return InvalidName(body="Invalid script name")

        entry = registry.get(script_name)
        if entry is None:
            logger.info("Script %r not found", script_name)
            return NotFound(body=not_found_message(script_name, registry))

        if not entry.packages or not entry.path.strip():
            logger.error("Script %r has an invalid configuration: %r", script_name, entry)
            return InternalError(body="Invalid script configuration")

        return Found(
            body=render_wrapper(entry, settings),
            headers={
                **NO_CACHE,
                "X-Content-Type-Options": "nosniff",
                "X-Frame-Options": "DENY",
                "X-Script-Name": script_name,
            },
        )
    except Exception:
        logger.exception("Failed to process request for %r", raw_path)
        return InternalError(body="Failed to process request")
