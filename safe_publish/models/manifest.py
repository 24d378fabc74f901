"""Package manifest models"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Tuple, Any


@dataclass(frozen=True)
class IncludeRule:
    """A single inclusion or exclusion pattern"""
    pattern: str
    include: bool = True  # False for exclusion rules

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'pattern': self.pattern,
            'include': self.include
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'IncludeRule':
        """Create from dictionary"""
        return cls(
            pattern=data['pattern'],
            include=data.get('include', True)
        )


@dataclass(frozen=True)
class PackageManifest:
    """Declared package metadata, loaded once per run"""
    name: str
    version: str
    root: Path  # Package directory
    include_rules: Tuple[IncludeRule, ...] = ()
    declared_includes: Tuple[str, ...] = ()
    declared_excludes: Tuple[str, ...] = ()
    include_all_by_default: bool = True
    always_included: Tuple[str, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def inclusion_rules(self) -> Tuple[IncludeRule, ...]:
        """Inclusion rules in declaration order"""
        return tuple(r for r in self.include_rules if r.include)

    @property
    def exclusion_rules(self) -> Tuple[IncludeRule, ...]:
        """Exclusion rules in declaration order"""
        return tuple(r for r in self.include_rules if not r.include)

    @property
    def package_id(self) -> str:
        """Package key (name-version)"""
        return f"{self.name}-{self.version}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'name': self.name,
            'version': self.version,
            'root': str(self.root),
            'include_rules': [r.to_dict() for r in self.include_rules],
            'declared_includes': list(self.declared_includes),
            'declared_excludes': list(self.declared_excludes),
            'include_all_by_default': self.include_all_by_default,
            'always_included': list(self.always_included),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PackageManifest':
        """Create from dictionary"""
        return cls(
            name=data['name'],
            version=data['version'],
            root=Path(data['root']),
            include_rules=tuple(IncludeRule.from_dict(r) for r in data.get('include_rules', [])),
            declared_includes=tuple(data.get('declared_includes', [])),
            declared_excludes=tuple(data.get('declared_excludes', [])),
            include_all_by_default=data.get('include_all_by_default', True),
            always_included=tuple(data.get('always_included', [])),
        )
