"""Dry-run build verification"""

import logging
from typing import Sequence

from ..api.exceptions import BuildVerificationFailed
from ..models.artifact import BuildArtifact
from ..models.manifest import PackageManifest
from ..models.result import CommandResult
from .build_tool import BuildTool


class BuildVerifier:
    """Checks that the package builds standalone from its packaged files"""

    def __init__(self, build_tool: BuildTool):
        self.build_tool = build_tool
        self.logger = logging.getLogger(self.__class__.__name__)

    def verify(self,
               manifest: PackageManifest,
               artifact: BuildArtifact,
               extra_args: Sequence[str] = ()) -> CommandResult:
        """
        Run the dry-run build

        A failing build is a legitimate stop condition and is not retried.

        Args:
            manifest: Package manifest
            artifact: Archive the dry run is expected to leave on disk
            extra_args: Arguments forwarded to the build tool

        Returns:
            CommandResult of the dry run

        Raises:
            BuildVerificationFailed: On a non-zero exit or a missing archive
        """
        result = self.build_tool.dry_run(manifest.root, extra_args)

        if not result.success:
            raise BuildVerificationFailed(
                f"dry run returned a non-zero exit code ({result.returncode}), "
                "check the output for details",
                result
            )

        if not artifact.exists():
            raise BuildVerificationFailed(
                f"dry run succeeded but did not produce the package archive at {artifact.path}",
                result
            )

        artifact.mark_produced()
        self.logger.info(f"Verification build produced {artifact.path}")
        return result
