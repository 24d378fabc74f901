"""Build artifact handle"""

from enum import Enum
from pathlib import Path
from typing import Optional


class ArtifactState(Enum):
    """Lifecycle of the packaged archive on disk"""
    ABSENT = "absent"
    PRODUCED = "produced"
    DELETED = "deleted"


class BuildArtifact:
    """Handle on the compressed package archive

    Lifecycle: absent -> produced (dry run) -> deleted (guard) -> produced
    (final upload). Only the build verifier and the artifact guard move it
    between states.
    """

    def __init__(self, path: Path, unpacked_dir: Optional[Path] = None):
        self.path = Path(path)
        self.unpacked_dir = Path(unpacked_dir) if unpacked_dir else None
        self.state = ArtifactState.ABSENT

    def exists(self) -> bool:
        """Check the archive on disk, not the recorded state"""
        return self.path.exists()

    def mark_produced(self) -> None:
        self.state = ArtifactState.PRODUCED

    def mark_deleted(self) -> None:
        self.state = ArtifactState.DELETED

    def __repr__(self) -> str:
        return f"BuildArtifact(path={str(self.path)!r}, state={self.state.value})"
