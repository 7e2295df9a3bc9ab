import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings, setup_logging
from app.models import ErrorResponse, ScriptInfo
from app.registry import Registry, discover_scripts, load_registry_file
from app.resolver import is_valid_name, normalize_name, resolve, script_url
from scripts._base import ScriptEntry

logger = logging.getLogger(__name__)


def load_registry(settings: Settings) -> Registry:
    if settings.registry_file is not None:
        return load_registry_file(settings.registry_file)
    return discover_scripts()


def create_app(settings: Settings | None = None, registry: Registry | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings)
        app.state.settings = settings
        app.state.registry = registry if registry is not None else load_registry(settings)
        logger.info("Serving %d script(s)", len(app.state.registry))
        yield

    app = FastAPI(title="Nix Scripts", lifespan=lifespan)

    # --- JSON API routes ---

    @app.get("/api/scripts")
    async def list_scripts_api(request: Request) -> list[ScriptInfo]:
        registry: Registry = request.app.state.registry
        return [_script_info(name, entry, settings) for name, entry in registry.items()]

    @app.get(
        "/api/scripts/{script_name}",
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    )
    async def get_script_api(request: Request, script_name: str):
        registry: Registry = request.app.state.registry
        name = normalize_name(script_name)
        if not is_valid_name(name):
            return JSONResponse(
                ErrorResponse(error="Invalid script name").model_dump(), status_code=400
            )
        entry = registry.get(name)
        if entry is None:
            return JSONResponse(
                ErrorResponse(
                    error=f"Script '{name}' not found", available=registry.names()
                ).model_dump(),
                status_code=404,
            )
        return _script_info(name, entry, settings)

    # --- Script routes ---

    @app.get("/{raw_path:path}")
    async def serve_script(request: Request, raw_path: str):
        result = resolve(raw_path, request.app.state.registry, settings)
        return Response(
            content=result.body,
            status_code=result.status,
            media_type=result.media_type,
            headers=result.headers,
        )

    return app


def _script_info(name: str, entry: ScriptEntry, settings: Settings) -> ScriptInfo:
    return ScriptInfo(
        name=name,
        description=entry.description,
        path=entry.path,
        packages=list(entry.packages),
        url=script_url(entry, settings),
    )


app = create_app()
