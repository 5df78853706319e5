"""Asset manifest: the files cached on install."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from todo_list.offline.messages import Request

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ["ko", "en", "ja", "zh", "es", "pt", "id", "tr", "de", "fr", "hi", "ru"]

CORE_ASSETS = [
    "index.html",
    "css/style.css",
    "js/app.js",
    "js/i18n.js",
    "manifest.json",
    "icon-192.svg",
    "icon-512.svg",
]


@dataclass
class AssetManifest:
    """Core asset paths plus one locale file per supported language."""

    scope: str
    core_assets: list[str] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)
    version: str | None = None  # Overrides the configured cache name when set

    @classmethod
    def default(cls, scope: str) -> "AssetManifest":
        return cls(scope=scope, core_assets=list(CORE_ASSETS), languages=list(SUPPORTED_LANGUAGES))

    @classmethod
    def from_yaml(cls, path: str | Path, scope: str) -> "AssetManifest":
        """Load manifest from a YAML file.

        Expected keys (all optional): cache_name, core_assets, languages.

        Raises:
            ValueError: If the file is not a YAML mapping
        """
        try:
            data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in manifest {path}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Manifest {path} must be a mapping")

        manifest = cls(
            scope=scope,
            core_assets=[str(p) for p in data.get("core_assets", CORE_ASSETS)],
            languages=[str(lang) for lang in data.get("languages", SUPPORTED_LANGUAGES)],
            version=data.get("cache_name"),
        )
        logger.info(
            f"[AssetManifest] Loaded {path}: {len(manifest.core_assets)} assets, "
            f"{len(manifest.languages)} locales"
        )
        return manifest

    def _url(self, path: str) -> str:
        if path.startswith("/"):
            return path
        return self.scope + path

    @property
    def fallback_url(self) -> str:
        """Root document served when offline and nothing else matches."""
        return self._url("index.html")

    def core_requests(self) -> list[Request]:
        return [Request(self._url(path)) for path in self.core_assets]

    def locale_requests(self) -> list[Request]:
        return [Request(self._url(f"js/locales/{lang}.json")) for lang in self.languages]
