"""External build tool port"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol, Sequence

from ..api.exceptions import ManifestError
from ..constants import (
    DEFAULT_BUILD_TOOL,
    DRY_RUN_FLAG,
    NO_VERIFY_FLAG,
    PACKAGE_DIR,
    ARCHIVE_FILE_PATTERN,
    ARCHIVE_PREFIX_PATTERN,
)
from ..models.artifact import BuildArtifact
from ..models.result import CommandResult
from ..utils.process_utils import run_command

CommandRunner = Callable[[Sequence[str], Path], CommandResult]


class BuildTool(Protocol):
    """What the pipeline needs from the package manager's build tool"""

    def dry_run(self, cwd: Path, extra_args: Sequence[str] = ()) -> CommandResult:
        ...

    def publish(self, cwd: Path, extra_args: Sequence[str] = ()) -> CommandResult:
        ...

    def artifact_for(self, target_directory: Path, name: str, version: str) -> BuildArtifact:
        ...


class CargoBuildTool:
    """Drives ``cargo publish`` and ``cargo metadata`` as subprocesses"""

    def __init__(self,
                 command: str = DEFAULT_BUILD_TOOL,
                 runner: Optional[CommandRunner] = None):
        """
        Initialize build tool

        Args:
            command: Cargo executable
            runner: Command runner, ``run_command`` by default
        """
        self.command = command
        self.runner = runner or run_command
        self.logger = logging.getLogger(self.__class__.__name__)

    def dry_run(self, cwd: Path, extra_args: Sequence[str] = ()) -> CommandResult:
        """Package and compile in isolation without uploading"""
        argv = [self.command, "publish", DRY_RUN_FLAG, *self._without(extra_args, DRY_RUN_FLAG)]
        self.logger.info(f"Run verification build with the following command: `{' '.join(argv)}`")
        return self.runner(argv, cwd)

    def publish(self, cwd: Path, extra_args: Sequence[str] = ()) -> CommandResult:
        """Repackage from source and upload, skipping the verification build"""
        argv = [self.command, "publish", NO_VERIFY_FLAG, *self._without(extra_args, NO_VERIFY_FLAG)]
        self.logger.info(f"Run cargo publish with the following command: `{' '.join(argv)}`")
        return self.runner(argv, cwd)

    def metadata(self, cwd: Path, manifest_path: Optional[Path] = None) -> Dict[str, Any]:
        """
        Query workspace metadata

        Args:
            cwd: Working directory
            manifest_path: Optional explicit Cargo.toml

        Returns:
            Parsed ``cargo metadata`` document

        Raises:
            ManifestError: If cargo fails or prints invalid JSON
        """
        argv = [self.command, "metadata", "--no-deps", "--format-version", "1", "--locked"]
        if manifest_path:
            argv.extend(["--manifest-path", str(manifest_path)])

        result = self.runner(argv, cwd)
        if not result.success:
            raise ManifestError(f"Failed to get project metadata:\n{result.output}")

        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ManifestError(f"Invalid `cargo metadata` output: {e}") from e

    @staticmethod
    def artifact_for(target_directory: Path, name: str, version: str) -> BuildArtifact:
        """Locate the archive a dry run leaves behind"""
        package_dir = Path(target_directory) / PACKAGE_DIR
        return BuildArtifact(
            path=package_dir / ARCHIVE_FILE_PATTERN.format(name=name, version=version),
            unpacked_dir=package_dir / ARCHIVE_PREFIX_PATTERN.format(name=name, version=version)
        )

    @staticmethod
    def _without(args: Sequence[str], flag: str):
        return [a for a in args if a != flag]
