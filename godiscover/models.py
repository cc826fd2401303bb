"""
Data model for resource discovery.

  • DiscoveredResource — one matched top-level binding (immutable)
  • DiscoverResult     — resources + known names + non-fatal errors
  • WalkOptions        — skip rules for directory traversal
  • TypeClassifier     — the injected "is this a resource?" predicate
"""

import os
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import DiscoveryError

# classify(qualifier, type_name, imports) -> kind or None
TypeClassifier = Callable[[str, str, Mapping[str, str]], Optional[str]]


# ═══════════════════════════════════════════════════════════════════════
#  Configuration
# ═══════════════════════════════════════════════════════════════════════

class WalkOptions(BaseModel):
    """Skip rules applied while walking a source tree."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    skip_hidden: bool = True        # directories starting with "."
    skip_vendor: bool = True        # "vendor" directories
    skip_testdata: bool = True      # "testdata" directories
    skip_tests: bool = True         # *_test.go files
    exclude_dirs: FrozenSet[str] = frozenset()
    max_workers: int = Field(default=1, ge=1)

    @field_validator("exclude_dirs")
    @classmethod
    def _bare_names_only(cls, value: FrozenSet[str]) -> FrozenSet[str]:
        for name in value:
            if not name or "/" in name or os.sep in name:
                raise ValueError(
                    f"exclude_dirs entries must be bare directory names, got {name!r}"
                )
        return value


# ═══════════════════════════════════════════════════════════════════════
#  Results
# ═══════════════════════════════════════════════════════════════════════

class DiscoveredResource(BaseModel):
    """A top-level binding whose type the classifier recognised."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: str
    file: str
    line: int                       # 1-indexed
    dependencies: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "kind": self.kind,
            "file": self.file,
            "line": self.line,
            "dependencies": list(self.dependencies),
        }


@dataclass
class DiscoverResult:
    """
    Aggregate of one or more per-file scans.

    Per-file results are built with the ``add_*`` methods and then folded
    together with ``merge()``, which never mutates either operand.
    """
    resources: List[DiscoveredResource] = field(default_factory=list)
    known_names: Set[str] = field(default_factory=set)
    errors: List[DiscoveryError] = field(default_factory=list)

    def add_resource(self, resource: DiscoveredResource):
        self.resources.append(resource)

    def add_name(self, name: str):
        self.known_names.add(name)

    def add_error(self, error: DiscoveryError):
        self.errors.append(error)

    def merge(self, other: "DiscoverResult") -> "DiscoverResult":
        """Concatenate resources and errors, union the name sets."""
        return DiscoverResult(
            resources=self.resources + other.resources,
            known_names=self.known_names | other.known_names,
            errors=self.errors + other.errors,
        )

    @classmethod
    def combine(cls, results: Iterable["DiscoverResult"]) -> "DiscoverResult":
        """Merge many results in order, in a single pass."""
        combined = cls()
        for r in results:
            combined.resources.extend(r.resources)
            combined.known_names.update(r.known_names)
            combined.errors.extend(r.errors)
        return combined

    @property
    def resource_names(self) -> List[str]:
        return [r.name for r in self.resources]

    def resources_in(self, file_path: str) -> List[DiscoveredResource]:
        """Resources declared in one file, in declaration order."""
        return [r for r in self.resources if r.file == file_path]

    def files(self) -> List[str]:
        """Files that contributed at least one resource, first-seen order."""
        seen: Dict[str, None] = {}
        for r in self.resources:
            seen.setdefault(r.file, None)
        return list(seen)

    def to_dict(self) -> Dict:
        return {
            "resources": [r.to_dict() for r in self.resources],
            "known_names": sorted(self.known_names),
            "errors": [str(e) for e in self.errors],
        }
