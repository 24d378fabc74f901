"""Pytest configuration and fixtures for safe-publish tests."""
import io
import tarfile
from pathlib import Path

import pytest

from safe_publish.core.build_tool import CargoBuildTool
from safe_publish.models import CommandResult


class StubBuildTool:
    """Build tool double that writes the archive a real dry run would."""

    def __init__(self, dry_run_code=0, publish_code=0, produce_archive=True,
                 dry_run_stderr="", on_dry_run=None):
        self.dry_run_code = dry_run_code
        self.publish_code = publish_code
        self.produce_archive = produce_archive
        self.dry_run_stderr = dry_run_stderr
        self.on_dry_run = on_dry_run
        self.calls = []
        self.archive = None
        self.archive_present_at_publish = None

    def artifact_for(self, target_directory, name, version):
        artifact = CargoBuildTool.artifact_for(target_directory, name, version)
        self.archive = artifact.path
        return artifact

    def dry_run(self, cwd, extra_args=()):
        self.calls.append(("dry_run", tuple(extra_args)))
        if self.on_dry_run is not None:
            self.on_dry_run(Path(cwd))
        if self.produce_archive and self.dry_run_code == 0:
            self.archive.parent.mkdir(parents=True, exist_ok=True)
            self.archive.write_bytes(b"verified archive")
        return CommandResult(
            argv=("cargo", "publish", "--dry-run", *extra_args),
            cwd=Path(cwd),
            returncode=self.dry_run_code,
            stderr=self.dry_run_stderr,
        )

    def publish(self, cwd, extra_args=()):
        self.calls.append(("publish", tuple(extra_args)))
        self.archive_present_at_publish = self.archive.exists()
        return CommandResult(
            argv=("cargo", "publish", "--no-verify", *extra_args),
            cwd=Path(cwd),
            returncode=self.publish_code,
            stderr="" if self.publish_code == 0 else "error: api errors (status 403 Forbidden)",
        )

    @property
    def call_names(self):
        return [name for name, _ in self.calls]


class StubRegistry:
    """Registry client double serving fixed archive bytes."""

    def __init__(self, data=None, error=None):
        self.data = data
        self.error = error
        self.requests = []

    def download(self, name, version):
        self.requests.append((name, version))
        if self.error is not None:
            raise self.error
        return self.data


def build_crate(name, version, files):
    """Gzip'd tarball laid out the way the registry serves packages."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for path, content in files.items():
            info = tarfile.TarInfo(f"{name}-{version}/{path}")
            info.size = len(content)
            tar.addfile(info, io.BytesIO(content))
    return buf.getvalue()


@pytest.fixture
def crate_bytes():
    return build_crate


@pytest.fixture
def stub_build_tool():
    return StubBuildTool


@pytest.fixture
def stub_registry():
    return StubRegistry


@pytest.fixture
def package_dir(tmp_path):
    """A small crate on disk: manifest, library source and readme."""
    root = tmp_path / "demo"
    (root / "src").mkdir(parents=True)
    (root / "Cargo.toml").write_text('[package]\nname = "demo"\nversion = "0.1.0"\n')
    (root / "src" / "lib.rs").write_text("pub fn answer() -> u32 {\n    42\n}\n")
    (root / "README.md").write_text("# demo\n")
    return root


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the caller's SAFE_PUBLISH_* settings out of the tests."""
    for name in ("SAFE_PUBLISH_CONFIG", "SAFE_PUBLISH_LOG_LEVEL",
                 "SAFE_PUBLISH_REGISTRY_URL", "SAFE_PUBLISH_BUILD_TOOL"):
        monkeypatch.delenv(name, raising=False)
