"""Resource discovery for Go source trees."""

from .classifiers import QualifiedTypeClassifier, chain, never_match, package_name
from .declarations import Declaration, TypeDescriptor, extract_declarations
from .dependencies import extract_dependencies
from .engine import discover, discover_dir, discover_file, discover_source, discover_tree
from .errors import DiscoveryError, GoParseError, RootAccessError, SourceReadError, WalkError
from .go_parser import SyntaxTree, extract_imports, parse_file, parse_source
from .graph import dependency_edges, ordered_by_dependencies, render_dot, render_mermaid
from .models import DiscoveredResource, DiscoverResult, TypeClassifier, WalkOptions
from .walker import collect_source_files, iter_source_files, walk

__all__ = [
    "discover",
    "discover_dir",
    "discover_file",
    "discover_source",
    "discover_tree",
    "DiscoveredResource",
    "DiscoverResult",
    "WalkOptions",
    "TypeClassifier",
    "QualifiedTypeClassifier",
    "chain",
    "never_match",
    "package_name",
    "Declaration",
    "TypeDescriptor",
    "extract_declarations",
    "extract_dependencies",
    "SyntaxTree",
    "parse_file",
    "parse_source",
    "extract_imports",
    "walk",
    "iter_source_files",
    "collect_source_files",
    "dependency_edges",
    "ordered_by_dependencies",
    "render_dot",
    "render_mermaid",
    "DiscoveryError",
    "RootAccessError",
    "WalkError",
    "SourceReadError",
    "GoParseError",
]
