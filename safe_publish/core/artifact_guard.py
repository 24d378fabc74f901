"""Artifact guard: close the window between verification and upload"""

import logging
import shutil
from typing import Callable, Optional, Sequence

from ..api.exceptions import ArtifactGuardFailed, UploadFailed
from ..models.artifact import BuildArtifact
from ..models.manifest import PackageManifest
from ..models.result import CommandResult
from .build_tool import BuildTool


class ArtifactGuard:
    """Deletes the verified archive, proves it is gone, then uploads

    The upload regenerates the archive from source, so nothing a build
    script wrote during the dry run can reach the registry.
    """

    def __init__(self, build_tool: BuildTool):
        self.build_tool = build_tool
        self.logger = logging.getLogger(self.__class__.__name__)

    def guard_and_upload(self,
                         manifest: PackageManifest,
                         artifact: BuildArtifact,
                         extra_args: Sequence[str] = (),
                         require_artifact: bool = True,
                         on_guarded: Optional[Callable[[], None]] = None) -> CommandResult:
        """
        Delete the archive and upload a freshly built one

        The upload is never invoked unless the archive is confirmed absent.

        Args:
            manifest: Package manifest
            artifact: Archive left by the verification build
            extra_args: Arguments forwarded to the build tool
            require_artifact: Fail if the archive is already missing
            on_guarded: Called after the deletion is confirmed, before upload

        Returns:
            CommandResult of the upload

        Raises:
            ArtifactGuardFailed: If the archive cannot be proven deleted
            UploadFailed: If the upload command fails
        """
        self._retire(artifact, require_artifact)

        if artifact.exists():
            raise ArtifactGuardFailed(
                f"Package archive still exists after deletion: {artifact.path}",
                artifact.path
            )
        artifact.mark_deleted()

        if on_guarded is not None:
            on_guarded()

        result = self.build_tool.publish(manifest.root, extra_args)
        if not result.success:
            raise UploadFailed(
                f"publish run returned a non-zero exit code ({result.returncode}), "
                "inspect the registry before retrying",
                result
            )

        artifact.mark_produced()
        return result

    def _retire(self, artifact: BuildArtifact, require_artifact: bool) -> None:
        if artifact.path.exists():
            try:
                artifact.path.unlink()
            except OSError as e:
                raise ArtifactGuardFailed(
                    f"Failed to remove the packed archive {artifact.path}: {e}",
                    artifact.path
                ) from e
            self.logger.info(f"Removed verified archive {artifact.path}")
        elif require_artifact:
            raise ArtifactGuardFailed(
                f"Package archive to remove does not exist: {artifact.path}",
                artifact.path
            )

        if artifact.unpacked_dir is not None and artifact.unpacked_dir.exists():
            try:
                shutil.rmtree(artifact.unpacked_dir)
            except OSError as e:
                raise ArtifactGuardFailed(
                    f"Failed to remove the unpacked package {artifact.unpacked_dir}: {e}",
                    artifact.path
                ) from e
