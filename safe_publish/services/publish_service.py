"""Publish pipeline controller"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple

from ..api.exceptions import (
    SafePublishError,
    ConfigError,
    IntegrityViolation,
    CommandFailedError,
    UploadFailed,
    PostPublishMismatch,
)
from ..constants import CompareMode, PipelineStep, EMOJI_ARROW
from ..core.artifact_guard import ArtifactGuard
from ..core.build_tool import BuildTool
from ..core.build_verifier import BuildVerifier
from ..core.integrity_checker import IntegrityChecker
from ..core.matcher import PatternMatcher
from ..core.post_publish_verifier import PostPublishVerifier
from ..core.registry_client import RegistryClient
from ..models.manifest import PackageManifest
from ..models.repository import RepositoryStatus
from ..models.result import PipelineResult, PipelineState
from ..utils.git_utils import get_repository_status

StatusProvider = Callable[[Path], RepositoryStatus]


@dataclass
class PublishOptions:
    """Per-run switches mirroring ``cargo publish`` flags"""
    allow_dirty: bool = False
    dry_run: bool = False
    no_verify: bool = False
    extra_args: Tuple[str, ...] = ()


class PublishService:
    """Runs the publish pipeline

    Init -> IntegrityChecked -> BuildVerified -> ArtifactGuarded ->
    Published -> Verified, or Failed from any step. Every run starts from
    Init; nothing is retried or resumed across runs.
    """

    def __init__(self,
                 build_tool: BuildTool,
                 registry_client: RegistryClient,
                 status_provider: Optional[StatusProvider] = None,
                 matcher: Optional[PatternMatcher] = None,
                 compare_mode: CompareMode = CompareMode.EXACT):
        """
        Initialize publish service

        Args:
            build_tool: External build tool port
            registry_client: Registry download client
            status_provider: Captures the repository status for a root
            matcher: Inclusion pattern precedence rule
            compare_mode: Post-publish content comparison mode
        """
        self.build_tool = build_tool
        self.status_provider = status_provider or get_repository_status
        self.integrity_checker = IntegrityChecker(matcher)
        self.build_verifier = BuildVerifier(build_tool)
        self.artifact_guard = ArtifactGuard(build_tool)
        self.post_publish_verifier = PostPublishVerifier(registry_client, compare_mode)
        self.logger = logging.getLogger(self.__class__.__name__)

    def run(self,
            manifest: PackageManifest,
            target_directory: Path,
            options: Optional[PublishOptions] = None) -> PipelineResult:
        """
        Run the pipeline once

        Args:
            manifest: Package manifest
            target_directory: Build directory of the build tool
            options: Run options

        Returns:
            PipelineResult in a terminal state, or BuildVerified for a dry run
        """
        options = options or PublishOptions()
        result = PipelineResult(
            package_name=manifest.name,
            package_version=manifest.version,
            dry_run=options.dry_run
        )
        artifact = self.build_tool.artifact_for(target_directory, manifest.name, manifest.version)
        step = PipelineStep.INTEGRITY

        try:
            # 1. Repository integrity
            self._check_integrity(manifest, options, result)
            self._advance(result, PipelineState.INTEGRITY_CHECKED)

            # 2. Verification build
            step = PipelineStep.BUILD
            if options.no_verify:
                result.warnings.append("verification build skipped (--no-verify)")
            else:
                result.commands.append(
                    self.build_verifier.verify(manifest, artifact, options.extra_args)
                )
            self._advance(result, PipelineState.BUILD_VERIFIED)

            if options.dry_run:
                return result

            # 3. Artifact guard and upload
            step = PipelineStep.GUARD
            upload = self.artifact_guard.guard_and_upload(
                manifest,
                artifact,
                options.extra_args,
                require_artifact=not options.no_verify,
                on_guarded=lambda: self._advance(result, PipelineState.ARTIFACT_GUARDED)
            )
            result.commands.append(upload)
            self._advance(result, PipelineState.PUBLISHED)

            # 4. Post-publish verification
            step = PipelineStep.VERIFY
            result.diff_report = self.post_publish_verifier.verify(
                manifest,
                result.integrity.expected_files
            )
            self._advance(result, PipelineState.VERIFIED)

        except SafePublishError as e:
            if isinstance(e, UploadFailed):
                step = PipelineStep.UPLOAD
            if isinstance(e, CommandFailedError) and e.command_result is not None:
                result.commands.append(e.command_result)
            if isinstance(e, PostPublishMismatch):
                result.diff_report = e.diff_report
            self.logger.error(f"{step.value} step failed: {e}")
            result.fail(step.value, e)

        finally:
            result.complete()

        return result

    def _check_integrity(self,
                         manifest: PackageManifest,
                         options: PublishOptions,
                         result: PipelineResult) -> None:
        try:
            status = self.status_provider(manifest.root)
        except RuntimeError as e:
            raise ConfigError(str(e)) from e

        if not status.is_versioned:
            result.warnings.append(
                f"{manifest.root} is not inside a git repository, skipping the integrity check"
            )
            result.integrity = self.integrity_checker.expected_only(manifest, status)
            return

        if options.allow_dirty:
            report = self.integrity_checker.expected_only(manifest, status)
            for violation in report.violations:
                result.warnings.append(f"{violation.kind.value}: {violation.path}")
            result.integrity = report
            return

        try:
            result.integrity = self.integrity_checker.check(manifest, status)
        except IntegrityViolation as e:
            result.integrity = e.report
            raise

    def _advance(self, result: PipelineResult, state: PipelineState) -> None:
        self.logger.info(f"{result.state.value} {EMOJI_ARROW} {state.value}")
        result.advance(state)
