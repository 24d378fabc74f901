"""Repository status snapshot"""

from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, Optional


@dataclass(frozen=True)
class RepositoryStatus:
    """Point-in-time view of the working tree below a package root

    All paths are POSIX style and relative to ``root``. ``tracked``,
    ``untracked`` and ``ignored`` are disjoint; ``modified`` is the subset of
    ``tracked`` with uncommitted changes.
    """
    root: Path
    tracked: FrozenSet[str] = frozenset()
    untracked: FrozenSet[str] = frozenset()
    ignored: FrozenSet[str] = frozenset()
    modified: FrozenSet[str] = frozenset()
    vcs_root: Optional[Path] = None  # None when not under version control

    def __post_init__(self):
        overlap = (
            (self.tracked & self.untracked)
            | (self.tracked & self.ignored)
            | (self.untracked & self.ignored)
        )
        if overlap:
            raise ValueError(
                f"Path sets must be disjoint, found in more than one: {sorted(overlap)[:5]}"
            )
        if not self.modified <= self.tracked:
            raise ValueError("Modified paths must be tracked")

    @classmethod
    def create(cls,
               root: Path,
               tracked: Iterable[str] = (),
               untracked: Iterable[str] = (),
               ignored: Iterable[str] = (),
               modified: Iterable[str] = (),
               vcs_root: Optional[Path] = None) -> 'RepositoryStatus':
        """Build a status from plain iterables"""
        return cls(
            root=Path(root),
            tracked=frozenset(tracked),
            untracked=frozenset(untracked),
            ignored=frozenset(ignored),
            modified=frozenset(modified),
            vcs_root=vcs_root,
        )

    @property
    def all_paths(self) -> FrozenSet[str]:
        """Every known path, whatever its classification"""
        return self.tracked | self.untracked | self.ignored

    @property
    def is_versioned(self) -> bool:
        """Whether the root lives inside a version-controlled tree"""
        return self.vcs_root is not None

    def classify(self, path: str) -> str:
        """Classification of a single path"""
        if path in self.tracked:
            return "modified" if path in self.modified else "tracked"
        if path in self.untracked:
            return "untracked"
        if path in self.ignored:
            return "ignored"
        return "unknown"
