"""
Go Resource Discovery — MCP Server

Exposes the discovery engine as tools over the Model Context Protocol:

  1. set_walk_options — configure which directories and files a scan skips
  2. list_resources   — list resources discovered under a path (table / json)
  3. graph_resources  — render resource dependencies (mermaid / dot)

Resource types are given per call as a comma-separated list, e.g.
"schema.NodeType,schema.RelationshipType" or
"github.com/example/schema.NodeType".
"""

from mcp.server.fastmcp import FastMCP
import os
import sys
import json

# Ensure the package is importable when run as a script
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from pydantic import ValidationError

from godiscover import (
    QualifiedTypeClassifier,
    WalkOptions,
    discover,
    ordered_by_dependencies,
    render_dot,
    render_mermaid,
)

# ═══════════════════════════════════════════════════════════════════════
#  Server Setup
# ═══════════════════════════════════════════════════════════════════════

mcp = FastMCP("Go Resource Discovery")

walk_options = WalkOptions()


def _split_list(value: str) -> list:
    return [v.strip() for v in value.split(",") if v.strip()]


def _scan(path: str, resource_types: str):
    """Run discovery over comma-separated paths.

    Returns (result, error_message).  Exactly one is non-None.
    """
    roots = _split_list(path)
    if not roots:
        return None, "Error: no path given."
    try:
        classifier = QualifiedTypeClassifier(_split_list(resource_types))
    except ValueError as e:
        return None, f"Error: {e}"
    return discover(roots, walk_options, classifier), None


# ═══════════════════════════════════════════════════════════════════════
#  Tool 1 — Walk options
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def set_walk_options(
    skip_hidden: bool = True,
    skip_vendor: bool = True,
    skip_testdata: bool = True,
    skip_tests: bool = True,
    exclude_dirs: str = "",
    max_workers: int = 1,
) -> str:
    """
    Configure the skip rules used by subsequent scans.

    Args:
        skip_hidden:   Skip directories whose name starts with ".".
        skip_vendor:   Skip "vendor" directories.
        skip_testdata: Skip "testdata" directories.
        skip_tests:    Skip *_test.go files.
        exclude_dirs:  Comma-separated extra directory names to skip.
                       Example: "generated,third_party"
        max_workers:   Worker threads used to process files (1 = sequential).
    """
    global walk_options

    try:
        walk_options = WalkOptions(
            skip_hidden=skip_hidden,
            skip_vendor=skip_vendor,
            skip_testdata=skip_testdata,
            skip_tests=skip_tests,
            exclude_dirs=frozenset(_split_list(exclude_dirs)),
            max_workers=max_workers,
        )
    except ValidationError as e:
        return f"Error: invalid walk options:\n{e}"

    excluded = ", ".join(sorted(walk_options.exclude_dirs)) or "none"
    return (
        f"Walk options updated.\n"
        f"Hidden: {'skip' if walk_options.skip_hidden else 'scan'}, "
        f"vendor: {'skip' if walk_options.skip_vendor else 'scan'}, "
        f"testdata: {'skip' if walk_options.skip_testdata else 'scan'}, "
        f"tests: {'skip' if walk_options.skip_tests else 'scan'}.\n"
        f"Extra excluded directories: {excluded}. Workers: {walk_options.max_workers}."
    )


# ═══════════════════════════════════════════════════════════════════════
#  Tool 2 — List resources
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def list_resources(path: str, resource_types: str, format: str = "table") -> str:
    """
    Lists the resources discovered under a file or directory.

    Args:
        path:           File or directory to scan (comma-separate several).
        resource_types: Comma-separated types that count as resources.
        format:         "table" (markdown, default) or "json".
    """
    if format not in ("table", "json"):
        return f"Error: unknown format '{format}'. Use 'table' or 'json'."

    result, error = _scan(path, resource_types)
    if error:
        return error

    if format == "json":
        return json.dumps(result.to_dict(), indent=2)

    if not result.resources:
        out = f"No resources found under {path} ({len(result.known_names)} variables scanned).\n"
    else:
        out = f"**{len(result.resources)} resources under {path}:**\n\n"
        out += "| Name | Kind | Location | Depends on |\n"
        out += "|------|------|----------|------------|\n"
        for r in ordered_by_dependencies(result):
            deps = ", ".join(r.dependencies) or "-"
            out += f"| {r.name} | {r.kind} | {r.file}:{r.line} | {deps} |\n"

    if result.errors:
        out += f"\n**{len(result.errors)} problem(s) during the scan:**\n\n"
        for e in result.errors:
            out += f"- {e}\n"
    return out


# ═══════════════════════════════════════════════════════════════════════
#  Tool 3 — Dependency graph
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def graph_resources(path: str, resource_types: str, format: str = "mermaid") -> str:
    """
    Renders the dependency graph between discovered resources.
    Edges only connect resources declared in the same file.

    Args:
        path:           File or directory to scan (comma-separate several).
        resource_types: Comma-separated types that count as resources.
        format:         "mermaid" (default) or "dot".
    """
    renderers = {"mermaid": render_mermaid, "dot": render_dot}
    if format not in renderers:
        return f"Error: unknown format '{format}'. Use 'mermaid' or 'dot'."

    result, error = _scan(path, resource_types)
    if error:
        return error
    return renderers[format](result)


if __name__ == "__main__":
    # Debug: Print loaded tools to stderr (visible in MCP logs)
    try:
        if hasattr(mcp, "_tool_manager") and hasattr(mcp._tool_manager, "_tools"):
            tools = mcp._tool_manager._tools.keys()
            print(f"DEBUG: Discovery server starting with {len(tools)} tools: {list(tools)}", file=sys.stderr)
        else:
            print("DEBUG: Discovery server starting (cannot inspect tools)", file=sys.stderr)
    except Exception as e:
        print(f"DEBUG: Error inspecting tools: {e}", file=sys.stderr)

    mcp.run()
