"""Site configuration accessor and the default YAML loader.

Sites keep their settings in the repository that receives entries. API
version 1 reads the ``staticman`` section of ``_config.yml``; later versions
read the ``<property>`` section of ``staticman.yml`` (the whole file when no
property is given).

The loader is a collaborator of the verification gate and is consumed only
through :meth:`SiteConfigLoader.get_site_config`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import yaml

from formgate.context import EntryParams
from formgate.errors import GatewayError

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class ConfigObject:
    file: str
    path: str


def create_config_object(api_version: str, property: str | None = None) -> ConfigObject:
    """Resolve which file and section hold the site configuration."""
    if str(api_version) == "1":
        return ConfigObject(file="_config.yml", path="staticman")
    return ConfigObject(file="staticman.yml", path=property or "")


class SiteConfig:
    """Read-only key/value accessor with dotted-path lookup."""

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: Mapping[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, Mapping):
                return default
            node = node.get(part, _MISSING)
            if node is _MISSING:
                return default
        return node

    def __contains__(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def __repr__(self) -> str:
        return f"SiteConfig(keys={sorted(self._data)})"


class SiteConfigLoader(Protocol):
    async def get_site_config(self, params: EntryParams) -> SiteConfig: ...


class FileSiteConfigLoader:
    """Load site configuration from ``<sites_dir>/<user>/<repo>/<branch>/``."""

    def __init__(self, sites_dir: str | Path) -> None:
        self.sites_dir = Path(sites_dir)

    def config_path(self, params: EntryParams) -> Path:
        config_object = create_config_object(params.version, params.property)
        return self.sites_dir / params.username / params.repository / params.branch / config_object.file

    def load(self, params: EntryParams) -> SiteConfig:
        config_object = create_config_object(params.version, params.property)
        path = self.config_path(params)

        if not path.is_file():
            logger.warning("Site configuration file missing: %s", path)
            raise GatewayError("MISSING_CONFIG_FILE", data={"file": config_object.file})

        with open(path, encoding="utf-8") as f:
            document = yaml.safe_load(f) or {}
        if not isinstance(document, Mapping):
            document = {}

        section = document.get(config_object.path) if config_object.path else document
        if not isinstance(section, Mapping):
            logger.warning("Site configuration block '%s' missing in %s", config_object.path, path)
            raise GatewayError(
                "MISSING_CONFIG_BLOCK",
                data={"file": config_object.file, "block": config_object.path},
            )
        return SiteConfig(section)

    async def get_site_config(self, params: EntryParams) -> SiteConfig:
        return await asyncio.to_thread(self.load, params)
