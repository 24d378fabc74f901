import pytest

from safe_publish.api.exceptions import ConfigError
from safe_publish.constants import CompareMode, MatcherKind, DEFAULT_REGISTRY_URL
from safe_publish.models import Config
from safe_publish.services import ConfigService


def test_defaults_without_file(tmp_path):
    config = ConfigService(tmp_path).config

    assert config.registry.url == DEFAULT_REGISTRY_URL
    assert config.retry.retry_count == 3
    assert config.verification.compare_mode == CompareMode.EXACT
    assert config.build.command == "cargo"


def test_project_file_is_loaded(tmp_path, monkeypatch):
    monkeypatch.setenv("MIRROR_HOST", "mirror.example.org")
    (tmp_path / ".safe-publish.yaml").write_text(
        "registry:\n"
        "  url: https://${MIRROR_HOST}/crates/{name}/{version}/download\n"
        "  timeout: 10\n"
        "retry:\n"
        "  retry_count: 5\n"
        "  retry_delay: 0.5\n"
        "verification:\n"
        "  compare_mode: whitespace\n"
        "  matcher: most-specific\n"
    )

    config = ConfigService(tmp_path).config

    assert config.registry.download_url("demo", "0.1.0") == (
        "https://mirror.example.org/crates/demo/0.1.0/download"
    )
    assert config.registry.timeout == 10
    assert config.retry.retry_count == 5
    assert config.verification.compare_mode == CompareMode.WHITESPACE
    assert config.verification.matcher == MatcherKind.MOST_SPECIFIC


def test_environment_overrides(tmp_path, monkeypatch):
    (tmp_path / ".safe-publish.yaml").write_text("build:\n  command: cargo\n")
    monkeypatch.setenv("SAFE_PUBLISH_BUILD_TOOL", "/opt/rust/bin/cargo")
    monkeypatch.setenv("SAFE_PUBLISH_REGISTRY_URL", "http://localhost:8080/{name}/{version}")

    config = ConfigService(tmp_path).config

    assert config.build.command == "/opt/rust/bin/cargo"
    assert config.registry.url == "http://localhost:8080/{name}/{version}"


def test_config_path_from_environment(tmp_path, monkeypatch):
    custom = tmp_path / "ci.yaml"
    custom.write_text("retry:\n  retry_count: 0\n")
    monkeypatch.setenv("SAFE_PUBLISH_CONFIG", str(custom))

    service = ConfigService(tmp_path / "elsewhere")

    assert service.config.retry.max_attempts == 1


def test_explicit_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        ConfigService(tmp_path, tmp_path / "missing.yaml").load_config()


def test_invalid_yaml(tmp_path):
    (tmp_path / ".safe-publish.yaml").write_text("registry: [unclosed\n")

    with pytest.raises(ConfigError):
        ConfigService(tmp_path).load_config()


def test_root_must_be_mapping(tmp_path):
    (tmp_path / ".safe-publish.yaml").write_text("- just\n- a list\n")

    with pytest.raises(ConfigError):
        ConfigService(tmp_path).load_config()


@pytest.mark.parametrize("content", [
    "registry:\n  url: https://crates.example.org/download\n",
    "verification:\n  compare_mode: fuzzy\n",
    "retry:\n  retry_count: -1\n",
    "build:\n  executable: cargo\n",
])
def test_invalid_values(tmp_path, content):
    (tmp_path / ".safe-publish.yaml").write_text(content)

    with pytest.raises(ConfigError):
        ConfigService(tmp_path).load_config()


def test_config_round_trip():
    config = Config.from_dict({"verification": {"matcher": "most-specific"}})

    assert Config.from_dict(config.to_dict()) == config
