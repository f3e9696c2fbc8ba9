"""
Build Info Service - Read the build descriptor stamped into the running program
Sources are pluggable so the reporter never touches ambient state directly
"""
import json
import logging
from dataclasses import dataclass, field
from importlib import metadata
from pathlib import Path
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

DEVEL_VERSION = "(devel)"
DEFAULT_BUILD_INFO_PATH = "/data/build-info.json"

logger = logging.getLogger('buildinfo-report.build_info')


class BuildInfoUnavailable(Exception):
    """Raised when the host cannot supply build metadata for this program."""

    def __init__(self, message: str = "failed to read build info"):
        super().__init__(message)


class Setting(NamedTuple):
    key: str
    value: str


@dataclass(frozen=True)
class BuildInfo:
    """
    Immutable snapshot of how the running program was built.

    Settings stay an ordered tuple of pairs; keys are not assumed unique.
    """
    main_version: str
    settings: Tuple[Setting, ...] = field(default_factory=tuple)
    path: str = ""


class BuildInfoSource:
    """Capability that yields the build descriptor for the current program."""

    def read(self) -> BuildInfo:
        raise NotImplementedError


def _as_text(value: Any) -> str:
    """Render a JSON scalar the way build stamps record it"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


# Flat image stamp key -> setting key, in emitted order
_FLAT_STAMP_KEYS = [
    ('git_sha', 'vcs.revision'),
    ('git_ref', 'vcs.ref'),
    ('git_time', 'vcs.time'),
    ('commit_time', 'vcs.time'),
    ('git_dirty', 'vcs.modified'),
    ('build_time', 'build.time'),
]


class FileBuildInfoSource(BuildInfoSource):
    """
    Build stamp written next to the app by the image build.

    Accepts either the descriptor layout ({"main": ..., "settings": [...]})
    or the flat git_* stamp produced by the container build.
    """

    def __init__(self, path: str = DEFAULT_BUILD_INFO_PATH):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> BuildInfo:
        try:
            with open(self._path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            raise BuildInfoUnavailable(f"build stamp not found: {self._path}")
        except (OSError, UnicodeDecodeError) as e:
            raise BuildInfoUnavailable(f"cannot read {self._path}: {e}")
        except json.JSONDecodeError as e:
            raise BuildInfoUnavailable(f"invalid JSON in {self._path}: {e}")

        if not isinstance(data, dict):
            raise BuildInfoUnavailable(f"{self._path} does not contain a JSON object")

        if 'main' in data or 'settings' in data:
            info = self._parse_descriptor(data)
        else:
            info = self._parse_flat_stamp(data)

        logger.debug(f"Loaded build stamp from {self._path}: {len(info.settings)} settings")
        return info

    def _parse_descriptor(self, data: Dict[str, Any]) -> BuildInfo:
        main = data.get('main') or {}
        if not isinstance(main, dict):
            raise BuildInfoUnavailable(f"{self._path}: 'main' must be an object")

        raw_settings = data.get('settings') or []
        if not isinstance(raw_settings, list):
            raise BuildInfoUnavailable(f"{self._path}: 'settings' must be a list")

        settings: List[Setting] = []
        for entry in raw_settings:
            if not isinstance(entry, dict) or 'key' not in entry:
                raise BuildInfoUnavailable(f"{self._path}: malformed setting {entry!r}")
            settings.append(Setting(_as_text(entry['key']), _as_text(entry.get('value'))))

        return BuildInfo(
            main_version=_as_text(main.get('version')) or DEVEL_VERSION,
            settings=tuple(settings),
            path=_as_text(main.get('path')),
        )

    def _parse_flat_stamp(self, data: Dict[str, Any]) -> BuildInfo:
        settings: List[Setting] = []
        if data.get('git_sha'):
            settings.append(Setting('vcs', 'git'))

        seen = set()
        for stamp_key, setting_key in _FLAT_STAMP_KEYS:
            value = data.get(stamp_key)
            if value is None or value == '' or setting_key in seen:
                continue
            seen.add(setting_key)
            settings.append(Setting(setting_key, _as_text(value)))

        return BuildInfo(
            main_version=_as_text(data.get('git_version')) or DEVEL_VERSION,
            settings=tuple(settings),
            path=_as_text(data.get('name')),
        )


class DistributionBuildInfoSource(BuildInfoSource):
    """
    Installed package metadata.

    VCS settings come from the PEP 610 direct_url.json that pip records
    when a package is installed from a repository or a local checkout.
    """

    def __init__(self, name: str):
        self._name = name

    def read(self) -> BuildInfo:
        try:
            dist = metadata.distribution(self._name)
        except metadata.PackageNotFoundError:
            raise BuildInfoUnavailable(f"distribution not installed: {self._name}")

        version = dist.version or DEVEL_VERSION
        settings = tuple(self._direct_url_settings(dist))
        return BuildInfo(main_version=version, settings=settings, path=self._name)

    def _direct_url_settings(self, dist) -> Iterable[Setting]:
        raw = dist.read_text('direct_url.json')
        if not raw:
            return []

        try:
            direct_url = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring invalid direct_url.json for {self._name}: {e}")
            return []
        if not isinstance(direct_url, dict):
            logger.warning(f"Ignoring direct_url.json for {self._name}: not a JSON object")
            return []

        settings: List[Setting] = []
        vcs_info = direct_url.get('vcs_info')
        if isinstance(vcs_info, dict):
            settings.append(Setting('vcs', _as_text(vcs_info.get('vcs'))))
            if direct_url.get('url'):
                settings.append(Setting('vcs.url', _as_text(direct_url['url'])))
            if vcs_info.get('commit_id'):
                settings.append(Setting('vcs.revision', _as_text(vcs_info['commit_id'])))
            if vcs_info.get('requested_revision'):
                settings.append(Setting('vcs.requested_revision', _as_text(vcs_info['requested_revision'])))

        dir_info = direct_url.get('dir_info')
        if isinstance(dir_info, dict) and 'editable' in dir_info:
            settings.append(Setting('editable', _as_text(dir_info['editable'])))

        return settings


class ChainedBuildInfoSource(BuildInfoSource):
    """First source that yields a descriptor wins."""

    def __init__(self, sources: Iterable[BuildInfoSource]):
        self._sources = list(sources)

    def read(self) -> BuildInfo:
        for source in self._sources:
            try:
                return source.read()
            except BuildInfoUnavailable as e:
                logger.debug(f"{type(source).__name__}: {e}")
        raise BuildInfoUnavailable()


def default_source(config) -> BuildInfoSource:
    """
    Build the source chain from configuration.

    Args:
        config: ConfigService (or anything with a dot-notation get)

    Returns:
        Chained source: stamp file first, then the installed distribution
        when one is configured
    """
    sources: List[BuildInfoSource] = [
        FileBuildInfoSource(config.get('build_info.path', DEFAULT_BUILD_INFO_PATH))
    ]

    distribution: Optional[str] = config.get('build_info.distribution')
    if distribution:
        sources.append(DistributionBuildInfoSource(distribution))

    return ChainedBuildInfoSource(sources)
