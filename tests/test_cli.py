from pathlib import Path

import pytest
from click.testing import CliRunner

from safe_publish.api.exceptions import (
    ConfigError,
    IntegrityViolation,
    PostPublishMismatch,
)
from safe_publish.cli.commands import publish as publish_command
from safe_publish.cli.main import cli
from safe_publish.constants import CompareMode
from safe_publish.core.manifest_reader import LoadedPackage, build_manifest
from safe_publish.models import (
    CommandResult,
    DiffKind,
    DiffReport,
    IntegrityReport,
    PipelineResult,
    PipelineState,
    Violation,
    ViolationKind,
)


class FakePublisher:
    instances = []
    load_error = None
    outcome = None

    def __init__(self, cwd=None, config=None, config_path=None):
        self.config_path = config_path
        self.load_args = None
        self.publish_kwargs = None
        FakePublisher.instances.append(self)

    def load(self, manifest_path=None, package=None):
        self.load_args = (manifest_path, package)
        if FakePublisher.load_error is not None:
            raise FakePublisher.load_error
        manifest = build_manifest("demo", "0.1.0", Path("/work/demo"))
        return LoadedPackage(manifest=manifest, target_directory=Path("/work/demo/target"))

    def publish(self, **kwargs):
        self.publish_kwargs = kwargs
        return FakePublisher.outcome(kwargs)


def finished(*states):
    result = PipelineResult(package_name="demo", package_version="0.1.0")
    for state in states:
        result.advance(state)
    result.complete()
    return result


@pytest.fixture
def fake_publisher(monkeypatch):
    FakePublisher.instances = []
    FakePublisher.load_error = None
    FakePublisher.outcome = lambda kwargs: finished(
        PipelineState.INTEGRITY_CHECKED,
        PipelineState.BUILD_VERIFIED,
        PipelineState.ARTIFACT_GUARDED,
        PipelineState.PUBLISHED,
        PipelineState.VERIFIED,
    )
    monkeypatch.setattr(publish_command, "Publisher", FakePublisher)
    return FakePublisher


def test_successful_publish(fake_publisher):
    result = CliRunner().invoke(cli, ["publish"])

    assert result.exit_code == 0, result.output
    assert "Successfully published" in result.output
    assert fake_publisher.instances[0].publish_kwargs["dry_run"] is False


def test_options_and_cargo_arguments_are_forwarded(fake_publisher, tmp_path):
    manifest = tmp_path / "Cargo.toml"
    manifest.write_text("[package]\n")

    result = CliRunner().invoke(cli, [
        "publish",
        "--manifest-path", str(manifest),
        "-p", "demo",
        "--allow-dirty",
        "--no-verify",
        "--compare-mode", "whitespace",
        "--features", "full",
    ])

    assert result.exit_code == 0, result.output
    publisher = fake_publisher.instances[0]
    assert publisher.load_args == (manifest, "demo")
    kwargs = publisher.publish_kwargs
    assert kwargs["allow_dirty"] is True
    assert kwargs["no_verify"] is True
    assert kwargs["compare_mode"] == CompareMode.WHITESPACE
    assert tuple(kwargs["extra_args"]) == ("--features", "full")


def test_dry_run_message(fake_publisher):
    def outcome(kwargs):
        result = finished(PipelineState.INTEGRITY_CHECKED, PipelineState.BUILD_VERIFIED)
        result.dry_run = kwargs["dry_run"]
        return result

    fake_publisher.outcome = outcome

    result = CliRunner().invoke(cli, ["publish", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Dry run passed" in result.output


def test_integrity_failure_exit_code(fake_publisher):
    report = IntegrityReport(
        expected_files=frozenset({"Cargo.toml", "secret.rs"}),
        violations=(Violation("secret.rs", ViolationKind.UNEXPECTED_FILE, "untracked"),),
    )

    def outcome(kwargs):
        result = PipelineResult(package_name="demo", package_version="0.1.0")
        result.integrity = report
        result.fail("integrity", IntegrityViolation(report))
        return result

    fake_publisher.outcome = outcome

    result = CliRunner().invoke(cli, ["publish"])

    assert result.exit_code == 2
    assert "secret.rs" in result.output
    assert "integrity" in result.output


def test_build_output_is_printed(fake_publisher):
    from safe_publish.api.exceptions import BuildVerificationFailed

    command = CommandResult(
        argv=("cargo", "publish", "--dry-run"),
        cwd=Path("/work/demo"),
        returncode=101,
        stderr="error[E0425]: cannot find value `x`",
    )

    def outcome(kwargs):
        result = finished(PipelineState.INTEGRITY_CHECKED)
        result.commands.append(command)
        result.fail("build", BuildVerificationFailed("dry run failed", command))
        return result

    fake_publisher.outcome = outcome

    result = CliRunner().invoke(cli, ["publish"])

    assert result.exit_code == 3
    assert "error[E0425]: cannot find value `x`" in result.output


def test_mismatch_exit_code(fake_publisher):
    diff_report = DiffReport()
    diff_report.add("generated.rs", DiffKind.UNEXPECTED_REMOTE_FILE)

    def outcome(kwargs):
        result = finished(
            PipelineState.INTEGRITY_CHECKED,
            PipelineState.BUILD_VERIFIED,
            PipelineState.ARTIFACT_GUARDED,
            PipelineState.PUBLISHED,
        )
        result.diff_report = diff_report
        result.fail("verify", PostPublishMismatch("please yank", diff_report))
        return result

    fake_publisher.outcome = outcome

    result = CliRunner().invoke(cli, ["publish"])

    assert result.exit_code == 6
    assert "generated.rs" in result.output
    assert "yank" in result.output


def test_load_failure_exit_code(fake_publisher):
    fake_publisher.load_error = ConfigError("bad config")

    result = CliRunner().invoke(cli, ["publish"])

    assert result.exit_code == 1
    assert "bad config" in result.output
    assert fake_publisher.instances[0].publish_kwargs is None
