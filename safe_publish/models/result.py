"""Operation result models"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Any, Tuple, FrozenSet


class ViolationKind(Enum):
    """Integrity violation kinds"""
    UNEXPECTED_FILE = "unexpected-file"
    MISSING_EXPECTED_FILE = "missing-expected-file"
    UNCOMMITTED_CHANGE = "uncommitted-change"


class DiffKind(Enum):
    """Post-publish discrepancy kinds"""
    MISSING_LOCALLY = "missing-locally"
    MISSING_REMOTELY = "missing-remotely"
    CONTENT_MISMATCH = "content-mismatch"
    UNEXPECTED_REMOTE_FILE = "unexpected-remote-file"


class PipelineState(Enum):
    """Publish pipeline states"""
    INIT = "init"
    INTEGRITY_CHECKED = "integrity_checked"
    BUILD_VERIFIED = "build_verified"
    ARTIFACT_GUARDED = "artifact_guarded"
    PUBLISHED = "published"
    VERIFIED = "verified"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.VERIFIED, PipelineState.FAILED)


@dataclass(frozen=True)
class Violation:
    """Single integrity violation"""
    path: str
    kind: ViolationKind
    detail: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            'path': self.path,
            'kind': self.kind.value
        }
        if self.detail:
            data['detail'] = self.detail
        return data


@dataclass(frozen=True)
class IntegrityReport:
    """Result of the repository integrity check"""
    expected_files: FrozenSet[str]
    violations: Tuple[Violation, ...] = ()
    checked: bool = True  # False when the check was skipped

    @property
    def is_clean(self) -> bool:
        return not self.violations

    def by_kind(self, kind: ViolationKind) -> List[Violation]:
        """Violations of a single kind"""
        return [v for v in self.violations if v.kind == kind]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'checked': self.checked,
            'expected_files': sorted(self.expected_files),
            'violations': [v.to_dict() for v in self.violations]
        }


@dataclass(frozen=True)
class DiffEntry:
    """One discrepancy between published and local content"""
    path: str
    kind: DiffKind
    diff: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            'path': self.path,
            'kind': self.kind.value
        }
        if self.diff:
            data['diff'] = self.diff
        return data


@dataclass
class DiffReport:
    """Ordered discrepancies; empty means the upload matches"""
    entries: List[DiffEntry] = field(default_factory=list)

    def add(self, path: str, kind: DiffKind, diff: Optional[str] = None) -> None:
        self.entries.append(DiffEntry(path=path, kind=kind, diff=diff))

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def by_kind(self, kind: DiffKind) -> List[DiffEntry]:
        """Entries of a single kind"""
        return [e for e in self.entries if e.kind == kind]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {'entries': [e.to_dict() for e in self.entries]}


@dataclass(frozen=True)
class CommandResult:
    """Captured result of one external command"""
    argv: Tuple[str, ...]
    cwd: Path
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout followed by stderr, verbatim"""
        parts = [p for p in (self.stdout, self.stderr) if p]
        return "\n".join(parts)

    @property
    def command_line(self) -> str:
        return " ".join(self.argv)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'argv': list(self.argv),
            'cwd': str(self.cwd),
            'returncode': self.returncode,
            'stdout': self.stdout,
            'stderr': self.stderr
        }


@dataclass
class PublishedPackage:
    """Files of a downloaded package, keyed by package-relative path"""
    name: str
    version: str
    files: Dict[str, bytes] = field(default_factory=dict)

    @property
    def paths(self) -> List[str]:
        return sorted(self.files)


@dataclass
class PipelineResult:
    """Outcome of one publish pipeline run"""
    package_name: str
    package_version: str
    state: PipelineState = PipelineState.INIT
    history: List[PipelineState] = field(default_factory=lambda: [PipelineState.INIT])
    failed_step: Optional[str] = None
    error: Optional[Exception] = None
    dry_run: bool = False
    integrity: Optional[IntegrityReport] = None
    diff_report: Optional[DiffReport] = None
    commands: List[CommandResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    @property
    def success(self) -> bool:
        if self.state == PipelineState.VERIFIED:
            return True
        return self.dry_run and self.state == PipelineState.BUILD_VERIFIED

    @property
    def uploaded(self) -> bool:
        """Whether the package reached the registry"""
        return PipelineState.PUBLISHED in self.history

    @property
    def duration(self) -> Optional[float]:
        """Run duration in seconds"""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def advance(self, state: PipelineState) -> None:
        """Record a successful transition"""
        if self.state.is_terminal:
            raise RuntimeError(f"Pipeline already finished in state {self.state.value}")
        self.state = state
        self.history.append(state)

    def fail(self, step: str, error: Exception) -> None:
        """Record the failing step and stop"""
        self.failed_step = step
        self.error = error
        self.advance(PipelineState.FAILED)

    def complete(self) -> None:
        self.end_time = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'package': self.package_name,
            'version': self.package_version,
            'state': self.state.value,
            'history': [s.value for s in self.history],
            'success': self.success,
            'dry_run': self.dry_run,
            'failed_step': self.failed_step,
            'error': str(self.error) if self.error else None,
            'integrity': self.integrity.to_dict() if self.integrity else None,
            'diff_report': self.diff_report.to_dict() if self.diff_report else None,
            'commands': [c.to_dict() for c in self.commands],
            'warnings': self.warnings,
            'duration': self.duration
        }
