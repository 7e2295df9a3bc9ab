import importlib
import logging
import pkgutil
import re
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from pydantic import TypeAdapter, ValidationError

from app.models import RegistryFileEntry
from scripts._base import ScriptEntry

logger = logging.getLogger(__name__)

SCRIPT_NAME_RE = re.compile(r"[A-Za-z0-9_-]+")
_REGISTRY_FILE_ADAPTER = TypeAdapter(dict[str, RegistryFileEntry])


class RegistryError(Exception):
    """Raised at startup when the script registry is malformed."""


class Registry:
    """Read-only mapping of lowercase script name to its ScriptEntry."""

    def __init__(self, entries: Mapping[str, ScriptEntry]):
        self._entries = MappingProxyType(dict(entries))

    def get(self, name: str) -> ScriptEntry | None:
        return self._entries.get(name)

    def names(self) -> list[str]:
        return list(self._entries)

    def items(self):
        return self._entries.items()

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def build_registry(entries: Iterable[ScriptEntry]) -> Registry:
    """Index entries by lowercase name, rejecting bad or duplicate names.

    Empty package lists and blank paths are let through: those are reported
    per request as configuration errors.
    """
    indexed: dict[str, ScriptEntry] = {}
    for entry in entries:
        if not SCRIPT_NAME_RE.fullmatch(entry.name):
            raise RegistryError(f"Invalid script name in registry: {entry.name!r}")
        key = entry.name.lower()
        if key in indexed:
            raise RegistryError(f"Duplicate script name in registry: {entry.name!r}")
        indexed[key] = entry
    return Registry(indexed)


def discover_scripts(package: str = "scripts") -> Registry:
    """Scan the scripts/ package and register every module that exposes a `script` attribute."""
    pkg = importlib.import_module(package)
    entries = []

    modules = sorted(pkgutil.iter_modules(pkg.__path__), key=lambda m: m.name)
    for module_info in modules:
        if module_info.name.startswith("_"):
            continue
        module = importlib.import_module(f"{package}.{module_info.name}")
        script = getattr(module, "script", None)
        if script is None:
            continue
        if not isinstance(script, ScriptEntry):
            raise RegistryError(
                f"{package}.{module_info.name}.script is not a ScriptEntry"
            )
        entries.append(script)

    registry = build_registry(entries)
    logger.info("Discovered %d script(s) in %s", len(registry), package)
    return registry


def load_registry_file(path: Path | str) -> Registry:
    """Load a JSON registry of the form {name: {path, packages, description}}."""
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise RegistryError(f"Cannot read registry file {path}: {e}") from e

    try:
        data = _REGISTRY_FILE_ADAPTER.validate_json(raw)
    except ValidationError as e:
        raise RegistryError(f"Invalid registry file {path}: {e}") from e

    registry = build_registry(
        ScriptEntry(
            name=name,
            path=entry.path,
            packages=tuple(entry.packages),
            description=entry.description,
        )
        for name, entry in data.items()
    )
    logger.info("Loaded %d script(s) from %s", len(registry), path)
    return registry
