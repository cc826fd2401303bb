"""
Resource discovery — the per-file pipeline and the multi-root orchestrator.

    discover(roots, options, classifier)   scan files and directories, never raises
    discover_file(path, classifier)        one file, raises on read/parse failure
    discover_source(source, path, ...)     one in-memory source text
    discover_dir(path, classifier)         one directory, non-recursive

Each file is processed independently into its own DiscoverResult; those
are folded together in walk order, so running the per-file work on a
thread pool gives exactly the same result as running it sequentially.
"""

import os
import stat
import logging
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Union

from .declarations import TypeDescriptor, extract_declarations
from .dependencies import extract_dependencies
from .errors import DiscoveryError, RootAccessError
from .go_parser import SyntaxTree, extract_imports, parse_file, parse_source
from .models import DiscoveredResource, DiscoverResult, TypeClassifier, WalkOptions
from .walker import GO_SOURCE_SUFFIX, is_source_file, walk

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


# ═══════════════════════════════════════════════════════════════════════
#  Per-file pipeline
# ═══════════════════════════════════════════════════════════════════════

def _classify(
    classifier: TypeClassifier,
    descriptor: TypeDescriptor,
    imports: Mapping[str, str],
    where: str,
) -> Optional[str]:
    """Run the classifier; an exception counts as "no match"."""
    try:
        kind = classifier(descriptor.qualifier, descriptor.type_name, imports)
    except Exception as e:
        logger.warning("Classifier failed on %s (%s), treating as no match: %s",
                       where, descriptor, e)
        return None
    return kind or None


def discover_tree(tree: SyntaxTree, classifier: Optional[TypeClassifier] = None) -> DiscoverResult:
    """
    Discover resources in an already parsed file.

    Every top-level ``var`` name is tracked.  Names with a type descriptor
    are offered to the classifier; matches become resources whose
    dependencies are the names tracked so far (forward references are
    not visible).  With no classifier only names are tracked.
    """
    result = DiscoverResult()
    imports = MappingProxyType(extract_imports(tree))

    for decl in extract_declarations(tree):
        result.add_name(decl.name)

        if classifier is None or decl.type is None:
            continue

        kind = _classify(classifier, decl.type, imports, f"{tree.path}:{decl.line}")
        if kind is None:
            continue

        deps = extract_dependencies(decl.value, tree, result.known_names)
        result.add_resource(DiscoveredResource(
            name=decl.name,
            kind=kind,
            file=tree.path,
            line=decl.line,
            dependencies=tuple(deps),
        ))

    logger.debug("%s: %d names, %d resources",
                 tree.path, len(result.known_names), len(result.resources))
    return result


def discover_source(
    source: Union[bytes, str],
    path: str = "<source>",
    classifier: Optional[TypeClassifier] = None,
) -> DiscoverResult:
    """Discover resources in Go source text.  Raises GoParseError."""
    return discover_tree(parse_source(source, path), classifier)


def discover_file(path: PathLike, classifier: Optional[TypeClassifier] = None) -> DiscoverResult:
    """Discover resources in one Go file.

    Raises:
        SourceReadError: the file cannot be read.
        GoParseError:    the file is not valid Go.
    """
    return discover_tree(parse_file(os.fspath(path)), classifier)


def _discover_one(path: str, classifier: Optional[TypeClassifier]) -> DiscoverResult:
    """discover_file() with every failure captured in the result."""
    try:
        return discover_file(path, classifier)
    except DiscoveryError as e:
        logger.warning("Skipping %s", e)
        failed = DiscoverResult()
        failed.add_error(e)
        return failed
    except Exception as e:
        logger.error("Unexpected failure discovering %s: %s", path, e)
        failed = DiscoverResult()
        failed.add_error(DiscoveryError(path, f"unexpected error: {e}"))
        return failed


def _run_pipeline(
    paths: List[str],
    classifier: Optional[TypeClassifier],
    max_workers: int,
) -> List[DiscoverResult]:
    """Per-file results, in the same order as ``paths``."""
    if max_workers <= 1 or len(paths) < 2:
        return [_discover_one(p, classifier) for p in paths]

    with ThreadPoolExecutor(max_workers=min(max_workers, len(paths))) as executor:
        return list(executor.map(lambda p: _discover_one(p, classifier), paths))


# ═══════════════════════════════════════════════════════════════════════
#  Directory scans
# ═══════════════════════════════════════════════════════════════════════

def discover_dir(
    path: PathLike,
    classifier: Optional[TypeClassifier] = None,
    options: Optional[WalkOptions] = None,
) -> DiscoverResult:
    """
    Discover resources in the Go files directly inside one directory.

    Subdirectories are not entered.  Per-file failures are recorded in
    the result; a directory that cannot be listed raises RootAccessError.
    """
    if options is None:
        options = WalkOptions()
    path = os.fspath(path)
    try:
        entries = sorted(os.listdir(path))
    except OSError as e:
        raise RootAccessError(path, e.strerror or str(e)) from e

    files = [
        os.path.join(path, name) for name in entries
        if is_source_file(name, options) and os.path.isfile(os.path.join(path, name))
    ]
    return DiscoverResult.combine(_run_pipeline(files, classifier, options.max_workers))


def _discover_root(
    root: str,
    options: WalkOptions,
    classifier: Optional[TypeClassifier],
) -> DiscoverResult:
    try:
        st = os.stat(root)
    except OSError as e:
        error = RootAccessError(root, e.strerror or str(e))
        logger.warning("Cannot access root %s", error)
        failed = DiscoverResult()
        failed.add_error(error)
        return failed

    if not stat.S_ISDIR(st.st_mode):
        if not root.endswith(GO_SOURCE_SUFFIX):
            logger.info("Ignoring %s: not a %s file", root, GO_SOURCE_SUFFIX)
            return DiscoverResult()
        return _discover_one(root, classifier)

    files: List[str] = []
    walk_error: Optional[DiscoveryError] = None
    try:
        walk(root, options, files.append)
    except DiscoveryError as e:
        logger.warning("Walk of %s stopped: %s", root, e)
        walk_error = e

    result = DiscoverResult.combine(_run_pipeline(files, classifier, options.max_workers))
    if walk_error is not None:
        result.add_error(walk_error)
    return result


def discover(
    roots: Union[PathLike, Iterable[PathLike]],
    options: Optional[WalkOptions] = None,
    classifier: Optional[TypeClassifier] = None,
) -> DiscoverResult:
    """
    Discover resources under one or more roots (files or directories).

    Failures (missing roots, listing errors, unreadable or malformed
    files) are recorded in ``errors`` and never stop the scan.  An empty
    list of roots gives an empty result.

    Raises:
        TypeError: ``options`` is not a WalkOptions.
    """
    if options is None:
        options = WalkOptions()
    elif not isinstance(options, WalkOptions):
        raise TypeError(f"options must be WalkOptions, not {type(options).__name__}")

    if isinstance(roots, (str, os.PathLike)):
        roots = [roots]

    root_list = [os.fspath(r) for r in roots]
    result = DiscoverResult.combine(
        _discover_root(root, options, classifier) for root in root_list
    )

    logger.info(
        "Discovery finished: %d resources, %d names, %d errors across %d root(s)",
        len(result.resources), len(result.known_names), len(result.errors), len(root_list),
    )
    return result
