from pathlib import Path

import pytest

from safe_publish.api.exceptions import (
    ArtifactGuardFailed,
    BuildVerificationFailed,
    ConfigError,
    IntegrityViolation,
    PostPublishMismatch,
    RegistryUnavailable,
    UploadFailed,
)
from safe_publish.core.manifest_reader import build_manifest
from safe_publish.models import DiffKind, PipelineState, RepositoryStatus, ViolationKind
from safe_publish.services import PublishOptions, PublishService

FULL_RUN = [
    PipelineState.INIT,
    PipelineState.INTEGRITY_CHECKED,
    PipelineState.BUILD_VERIFIED,
    PipelineState.ARTIFACT_GUARDED,
    PipelineState.PUBLISHED,
    PipelineState.VERIFIED,
]


def clean_status(untracked=(), modified=(), versioned=True):
    def provider(root):
        return RepositoryStatus.create(
            root=root,
            tracked=["Cargo.toml", "README.md", "src/lib.rs"],
            untracked=untracked,
            ignored=["target/debug/demo"],
            modified=modified,
            vcs_root=root if versioned else None,
        )
    return provider


def published(package_dir, crate_bytes, **extra):
    files = {
        "Cargo.toml": b"# normalized\n",
        "Cargo.toml.orig": (package_dir / "Cargo.toml").read_bytes(),
        "README.md": (package_dir / "README.md").read_bytes(),
        "src/lib.rs": (package_dir / "src" / "lib.rs").read_bytes(),
        ".cargo_vcs_info.json": b"{}",
    }
    files.update(extra)
    return crate_bytes("demo", "0.1.0", files)


@pytest.fixture
def run(package_dir, tmp_path):
    def run_pipeline(tool, registry, status_provider=None, manifest=None, **options):
        service = PublishService(tool, registry, status_provider or clean_status())
        return service.run(
            manifest or build_manifest("demo", "0.1.0", package_dir),
            tmp_path / "target",
            PublishOptions(**options),
        )
    return run_pipeline


def test_untracked_file_halts_before_any_command(run, package_dir, stub_build_tool, stub_registry):
    tool = stub_build_tool()
    registry = stub_registry()
    manifest = build_manifest("demo", "0.1.0", package_dir, include=["src/lib.*"])

    result = run(tool, registry, clean_status(untracked=["src/lib.rs.orig"]), manifest)

    assert result.state == PipelineState.FAILED
    assert result.failed_step == "integrity"
    assert isinstance(result.error, IntegrityViolation)
    assert [v.kind for v in result.integrity.violations] == [ViolationKind.UNEXPECTED_FILE]
    assert PipelineState.BUILD_VERIFIED not in result.history
    assert tool.calls == []
    assert registry.requests == []


def test_failed_build_stops_before_guard(run, stub_build_tool, stub_registry):
    tool = stub_build_tool(dry_run_code=1, dry_run_stderr="compile error")
    registry = stub_registry()

    result = run(tool, registry)

    assert result.failed_step == "build"
    assert isinstance(result.error, BuildVerificationFailed)
    assert tool.call_names == ["dry_run"]
    assert result.commands[-1].stderr == "compile error"
    assert registry.requests == []
    assert result.history == [PipelineState.INIT, PipelineState.INTEGRITY_CHECKED, PipelineState.FAILED]


def test_matching_upload_is_verified(run, package_dir, crate_bytes, stub_build_tool, stub_registry):
    tool = stub_build_tool()
    registry = stub_registry(data=published(package_dir, crate_bytes))

    result = run(tool, registry)

    assert result.success
    assert result.history == FULL_RUN
    assert result.diff_report.is_empty
    assert tool.call_names == ["dry_run", "publish"]
    assert tool.archive_present_at_publish is False
    assert registry.requests == [("demo", "0.1.0")]
    assert result.duration is not None


def test_extra_remote_file_fails_after_upload(run, package_dir, crate_bytes, stub_build_tool, stub_registry):
    tool = stub_build_tool()
    data = published(package_dir, crate_bytes, **{"src/generated.rs": b"// build script output"})

    result = run(tool, stub_registry(data=data))

    assert not result.success
    assert result.uploaded
    assert result.failed_step == "verify"
    assert isinstance(result.error, PostPublishMismatch)
    assert [(e.path, e.kind) for e in result.diff_report] == [
        ("src/generated.rs", DiffKind.UNEXPECTED_REMOTE_FILE)
    ]


def test_dry_run_stops_after_build(run, stub_build_tool, stub_registry):
    tool = stub_build_tool()
    registry = stub_registry()

    result = run(tool, registry, dry_run=True)

    assert result.success
    assert result.state == PipelineState.BUILD_VERIFIED
    assert tool.call_names == ["dry_run"]
    assert tool.archive.exists()
    assert registry.requests == []


def test_no_verify_skips_build(run, package_dir, crate_bytes, stub_build_tool, stub_registry):
    tool = stub_build_tool()

    result = run(tool, stub_registry(data=published(package_dir, crate_bytes)), no_verify=True)

    assert result.success
    assert tool.call_names == ["publish"]
    assert any("--no-verify" in w for w in result.warnings)


def test_allow_dirty_turns_violations_into_warnings(run, package_dir, crate_bytes, stub_build_tool, stub_registry):
    tool = stub_build_tool()
    registry = stub_registry(data=published(package_dir, crate_bytes))

    result = run(tool, registry, clean_status(modified=["README.md"]), allow_dirty=True)

    assert result.success
    assert result.integrity.checked is False
    assert "uncommitted-change: README.md" in result.warnings


def test_outside_version_control_skips_check(run, package_dir, crate_bytes, stub_build_tool, stub_registry):
    tool = stub_build_tool()
    registry = stub_registry(data=published(package_dir, crate_bytes))

    result = run(tool, registry, clean_status(versioned=False))

    assert result.success
    assert any("not inside a git repository" in w for w in result.warnings)


def test_status_failure_is_config_error(run, stub_build_tool, stub_registry):
    def broken(root):
        raise RuntimeError("git exploded")

    result = run(stub_build_tool(), stub_registry(), broken)

    assert result.failed_step == "integrity"
    assert isinstance(result.error, ConfigError)


def test_upload_failure(run, stub_build_tool, stub_registry):
    tool = stub_build_tool(publish_code=101)
    registry = stub_registry()

    result = run(tool, registry)

    assert result.failed_step == "upload"
    assert isinstance(result.error, UploadFailed)
    assert PipelineState.ARTIFACT_GUARDED in result.history
    assert not result.uploaded
    assert result.commands[-1].returncode == 101
    assert registry.requests == []


def test_guard_failure_never_uploads(run, stub_build_tool, stub_registry, monkeypatch):
    tool = stub_build_tool()
    monkeypatch.setattr(Path, "unlink", lambda self, missing_ok=False: None)

    result = run(tool, stub_registry())

    assert result.failed_step == "guard"
    assert isinstance(result.error, ArtifactGuardFailed)
    assert tool.call_names == ["dry_run"]
    assert PipelineState.ARTIFACT_GUARDED not in result.history


def test_registry_outage_after_upload(run, stub_build_tool, stub_registry):
    tool = stub_build_tool()
    registry = stub_registry(error=RegistryUnavailable("registry down", attempts=4))

    result = run(tool, registry)

    assert result.uploaded
    assert result.failed_step == "verify"
    assert isinstance(result.error, RegistryUnavailable)


def test_extra_args_reach_both_commands(run, package_dir, crate_bytes, stub_build_tool, stub_registry):
    tool = stub_build_tool()

    run(tool, stub_registry(data=published(package_dir, crate_bytes)), extra_args=("--features", "full"))

    assert tool.calls == [
        ("dry_run", ("--features", "full")),
        ("publish", ("--features", "full")),
    ]


def test_finished_result_cannot_advance(run, stub_build_tool, stub_registry):
    result = run(stub_build_tool(dry_run_code=1), stub_registry())

    with pytest.raises(RuntimeError):
        result.advance(PipelineState.PUBLISHED)


def test_nested_package_files_are_not_expected_remotely(run, package_dir, crate_bytes, stub_build_tool, stub_registry):
    def provider(root):
        return RepositoryStatus.create(
            root=root,
            tracked=["Cargo.toml", "README.md", "src/lib.rs",
                     "demo-derive/Cargo.toml", "demo-derive/src/lib.rs"],
            vcs_root=root,
        )

    result = run(stub_build_tool(), stub_registry(data=published(package_dir, crate_bytes)), provider)

    assert result.success, result.error
    assert result.history == FULL_RUN
    assert "demo-derive/src/lib.rs" not in result.integrity.expected_files


def test_unreadable_local_file_fails_after_upload(run, package_dir, crate_bytes, stub_build_tool, stub_registry, monkeypatch):
    def read_local_file(root, path):
        raise PermissionError(13, "Permission denied", path)

    monkeypatch.setattr(
        "safe_publish.core.post_publish_verifier.read_local_file", read_local_file
    )

    result = run(stub_build_tool(), stub_registry(data=published(package_dir, crate_bytes)))

    assert result.state == PipelineState.FAILED
    assert result.uploaded
    assert result.failed_step == "verify"
    assert isinstance(result.error, PostPublishMismatch)
    assert "Permission denied" in str(result.error)
