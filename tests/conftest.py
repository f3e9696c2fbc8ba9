import pytest

from buildinfo_report.core import logging_service
from buildinfo_report.core.build_info_service import BuildInfo, Setting


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    for name in ("BUILD_INFO_CONFIG", "BUILD_INFO_PATH", "BUILD_INFO_DISTRIBUTION", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(logging_service, "_logging_service", None)


@pytest.fixture
def sample_info():
    return BuildInfo(
        main_version="v1.4.2",
        settings=(
            Setting("build.time", "2024-03-01T10:05:00Z"),
            Setting("vcs", "git"),
            Setting("python.version", "3.12.2"),
            Setting("vcs.revision", "abc123"),
            Setting("vcs.time", "2024-03-01T10:00:00Z"),
            Setting("vcs.modified", "false"),
        ),
    )
