"""
Ready-made type classifiers.

A classifier is any callable ``(qualifier, type_name, imports) -> kind or
None``.  Domain packages usually supply their own; these cover the common
"a fixed list of package types are resources" case.
"""

import re
import posixpath
from typing import Dict, Iterable, Mapping, Optional, Set

from .go_parser import is_builtin_type
from .models import TypeClassifier

_MAJOR_VERSION = re.compile(r"^v\d+$")


def package_name(import_path: str) -> str:
    """Default package name for an import path.

    ``github.com/x/schema`` → ``schema``; a trailing major version element
    is skipped, so ``github.com/x/schema/v2`` → ``schema``.
    """
    parts = [p for p in import_path.split("/") if p]
    if len(parts) > 1 and _MAJOR_VERSION.match(parts[-1]):
        return parts[-2]
    return posixpath.basename(import_path)


def never_match(qualifier: str, type_name: str, imports: Mapping[str, str]) -> Optional[str]:
    """Classifier that recognises nothing; discovery only tracks names."""
    return None


class QualifiedTypeClassifier:
    """
    Match a fixed set of resource types.

    Entries are ``"pkg.Type"`` (package name), ``"import/path.Type"`` (full
    import path) or ``"Type"`` (unqualified, same-package type).  The
    qualifier seen in source is resolved through the file's import table,
    so ``s.NodeType`` matches ``schema.NodeType`` when the file has
    ``import s "github.com/x/schema"``.  The kind reported is
    ``"<package>.<Type>"``.
    """

    def __init__(self, resource_types: Iterable[str]):
        self._qualified: Dict[str, Set[str]] = {}
        self._unqualified: Set[str] = set()
        for entry in resource_types:
            entry = entry.strip()
            if not entry:
                continue
            if "." not in entry:
                if is_builtin_type(entry):
                    raise ValueError(f"{entry!r} is a predeclared type, not a resource type")
                self._unqualified.add(entry)
                continue
            package_ref, type_name = entry.rsplit(".", 1)
            if not package_ref or not type_name:
                raise ValueError(f"Malformed resource type {entry!r}")
            self._qualified.setdefault(type_name, set()).add(package_ref)

    def __call__(self, qualifier: str, type_name: str, imports: Mapping[str, str]) -> Optional[str]:
        if not qualifier:
            return type_name if type_name in self._unqualified else None

        refs = self._qualified.get(type_name)
        if not refs:
            return None

        import_path = imports.get(qualifier)
        if import_path is None:
            # Not imported under that name; fall back to the name as written
            return f"{qualifier}.{type_name}" if qualifier in refs else None

        package = package_name(import_path)
        if import_path in refs or package in refs:
            return f"{package}.{type_name}"
        return None

    def __repr__(self) -> str:
        entries = sorted(
            [f"{p}.{t}" for t, pkgs in self._qualified.items() for p in pkgs]
            + list(self._unqualified)
        )
        return f"QualifiedTypeClassifier({entries!r})"


def chain(*classifiers: TypeClassifier) -> TypeClassifier:
    """Combine classifiers; the first non-None kind wins."""

    def classify(qualifier: str, type_name: str, imports: Mapping[str, str]) -> Optional[str]:
        for classifier in classifiers:
            kind = classifier(qualifier, type_name, imports)
            if kind:
                return kind
        return None

    return classify
