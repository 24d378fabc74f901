"""Publisher API for publishing operations"""

from pathlib import Path
from typing import Optional, Sequence

from ..constants import CompareMode
from ..core import CargoBuildTool, CargoManifestReader, RegistryClient, LoadedPackage, get_matcher
from ..models import Config, PipelineResult
from ..services import ConfigService, PublishService, PublishOptions


class Publisher:
    """Publisher class wiring the pipeline to cargo, git and the registry"""

    def __init__(self,
                 cwd: Optional[Path] = None,
                 config: Optional[Config] = None,
                 config_path: Optional[Path] = None):
        """
        Initialize publisher

        Args:
            cwd: Working directory, current directory by default
            config: Ready configuration; loaded from the package otherwise
            config_path: Explicit configuration file
        """
        self.cwd = Path(cwd or Path.cwd())
        self.config = config
        self.config_path = config_path
        self.loaded: Optional[LoadedPackage] = None
        self.warnings = []

    def load(self,
             manifest_path: Optional[Path] = None,
             package: Optional[str] = None) -> LoadedPackage:
        """
        Locate and read the package to publish

        Raises:
            ManifestError: If the package cannot be read
            ConfigError: If the configuration file is invalid
        """
        manifest_path = self._resolve(manifest_path)
        if self.config is None:
            # Build tool override must be known before metadata is queried
            self.config = ConfigService(self._config_root(manifest_path), self.config_path).config

        reader = CargoManifestReader(CargoBuildTool(self.config.build.command))
        self.loaded = reader.load(self.cwd, manifest_path, package)
        self.warnings = list(reader.warnings)
        return self.loaded

    def publish(self,
                manifest_path: Optional[Path] = None,
                package: Optional[str] = None,
                allow_dirty: bool = False,
                dry_run: bool = False,
                no_verify: bool = False,
                compare_mode: Optional[CompareMode] = None,
                extra_args: Sequence[str] = ()) -> PipelineResult:
        """
        Verify, upload and re-verify one package

        Args:
            manifest_path: Optional explicit Cargo.toml
            package: Package name inside a workspace
            allow_dirty: Report integrity violations as warnings only
            dry_run: Stop after the verification build
            no_verify: Skip the verification build
            compare_mode: Override the configured content comparison mode
            extra_args: Arguments forwarded to ``cargo publish``

        Returns:
            PipelineResult

        Raises:
            ManifestError: If the package cannot be read
            ConfigError: If the configuration file is invalid
        """
        manifest_path = self._resolve(manifest_path)
        loaded = self.loaded or self.load(manifest_path, package)
        config = self.config

        service = PublishService(
            build_tool=CargoBuildTool(config.build.command),
            registry_client=RegistryClient(config.registry, config.retry),
            matcher=get_matcher(config.verification.matcher),
            compare_mode=compare_mode or config.verification.compare_mode
        )

        forwarded = list(extra_args)
        if manifest_path:
            forwarded += ["--manifest-path", str(manifest_path)]
        if package:
            forwarded += ["--package", package]
        if allow_dirty:
            forwarded.append("--allow-dirty")

        result = service.run(
            loaded.manifest,
            loaded.target_directory,
            PublishOptions(
                allow_dirty=allow_dirty,
                dry_run=dry_run,
                no_verify=no_verify,
                extra_args=tuple(forwarded)
            )
        )
        result.warnings[:0] = self.warnings
        return result

    def _resolve(self, manifest_path: Optional[Path]) -> Optional[Path]:
        # cargo runs from the package directory, not from cwd
        if manifest_path is None:
            return None
        return (self.cwd / manifest_path).resolve()

    def _config_root(self, manifest_path: Optional[Path]) -> Path:
        if manifest_path:
            return manifest_path.parent
        return self.cwd


def publish(manifest_path: Optional[Path] = None,
            package: Optional[str] = None,
            **options) -> PipelineResult:
    """
    Convenience function to publish the package in the current directory

    Args:
        manifest_path: Optional explicit Cargo.toml
        package: Package name inside a workspace
        **options: Options passed to ``Publisher.publish``

    Returns:
        PipelineResult
    """
    publisher = Publisher()
    return publisher.publish(manifest_path=manifest_path, package=package, **options)
