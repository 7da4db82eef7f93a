"""MCP server exposing diagnosis tree navigation, search and assist tools."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from diagnosis_map.api import DiagnosisApi
from diagnosis_map.config import ROOT_ID
from diagnosis_map.core.assist.client import AssistClient
from diagnosis_map.core.search.resolver import EmptyQueryError, SearchResolver
from diagnosis_map.core.state.collapse import CollapseState
from diagnosis_map.core.tree.loader import default_store
from diagnosis_map.core.tree.markdown import render_outline, render_subtree_as_markdown
from diagnosis_map.core.tree.store import TreeStore
from diagnosis_map.models.node import FlatNode
from diagnosis_map.models.search import AssistMode, SearchMatch
from diagnosis_map.protocols import ResolverProtocol


def _node_dict(node: FlatNode) -> dict[str, Any]:
    return {
        "id": node.id,
        "label": node.label,
        "level": node.level,
        "severity": node.severity,
        "child_count": node.child_count,
    }


def _breadcrumbs_str(store: TreeStore, node_id: str) -> str:
    crumbs = store.breadcrumbs(node_id)
    return " > ".join(c.label[:40] for c in crumbs) if crumbs else ""


# --- Core functions (testable without MCP context) ---


def diagnosis_find_node(store: TreeStore, *, node_id: str) -> dict[str, Any]:
    """Look up one node by id."""
    node = store.find_by_id(node_id)
    if node is None:
        return {"error": f"Node '{node_id}' not found."}
    return {
        "node": _node_dict(node),
        "parent_id": node.parent_id,
        "children": list(node.child_ids),
        "breadcrumbs": _breadcrumbs_str(store, node_id),
    }


def diagnosis_get_node_context(
    store: TreeStore,
    *,
    node_id: str,
    sibling_count: int = 3,
) -> dict[str, Any]:
    """Get a node with breadcrumbs, siblings, and children.

    Args:
        node_id: Node ID.
        sibling_count: Number of siblings before/after to include.
    """
    context = store.node_context(node_id, sibling_count=max(0, sibling_count))
    if context is None:
        return {"error": f"Node '{node_id}' not found."}
    return {
        "node": _node_dict(context.node),
        "breadcrumbs": _breadcrumbs_str(store, node_id),
        "siblings_before": [{"id": s.id, "label": s.label} for s in context.siblings_before],
        "siblings_after": [{"id": s.id, "label": s.label} for s in context.siblings_after],
        "children": [
            {"id": c.id, "label": c.label, "child_count": c.child_count} for c in context.children
        ],
    }


def diagnosis_read_subtree(
    store: TreeStore,
    *,
    node_id: str,
    max_depth: int | None = None,
    output_format: str = "markdown",
) -> dict[str, Any]:
    """Read a node and its subtree as markdown or structured JSON.

    Args:
        node_id: Node ID to read.
        max_depth: Max depth levels to include (None = unlimited).
        output_format: "markdown" or "json".
    """
    node = store.find_by_id(node_id)
    if node is None:
        return {"error": f"Node '{node_id}' not found."}

    if output_format == "markdown":
        md = render_subtree_as_markdown(store, node_id=node_id, max_depth=max_depth, show_ids=True)
        return {
            "content": md,
            "node_id": node_id,
            "breadcrumbs": _breadcrumbs_str(store, node_id),
        }

    # JSON: nested children down to max_depth
    def _build_children(parent_id: str, remaining_depth: int | None) -> list[dict[str, Any]]:
        result_list = []
        for c in store.children(parent_id):
            entry = _node_dict(c)
            if remaining_depth is None or remaining_depth > 1:
                next_depth = None if remaining_depth is None else remaining_depth - 1
                entry["children"] = _build_children(c.id, next_depth)
            result_list.append(entry)
        return result_list

    return {
        "node": _node_dict(node),
        "children": _build_children(node_id, max_depth),
        "breadcrumbs": _breadcrumbs_str(store, node_id),
    }


def diagnosis_search(
    store: TreeStore,
    resolver: ResolverProtocol,
    *,
    query: str = "",
    reveal: bool = False,
) -> dict[str, Any]:
    """Resolve a problem description to a node, optionally revealing it.

    Args:
        query: Free-text business problem description.
        reveal: Include the outline with the path to the match expanded.
    """
    try:
        outcome = resolver.search(query)
    except EmptyQueryError:
        return {"error": "No search query provided.", "kind": None}

    result: dict[str, Any] = {"kind": outcome.kind, "message": outcome.message}
    if not isinstance(outcome, SearchMatch):
        return result

    result.update(
        node_id=outcome.node_id,
        label=outcome.label,
        confidence=outcome.confidence,
        reasoning=outcome.reasoning,
        in_tree=outcome.node_id in store,
    )
    if outcome.node_id in store:
        result["breadcrumbs"] = _breadcrumbs_str(store, outcome.node_id)
        if reveal:
            state = CollapseState(store)
            state.expand(store.ancestor_ids(outcome.node_id))
            result["outline"] = render_outline(
                store,
                visible=state.visible_set(),
                collapsed=state.collapsed,
                highlighted=outcome.node_id,
            )
    return result


def diagnosis_explain(
    assist: AssistClient, *, node_id: str, mode: str = "explain"
) -> dict[str, Any]:
    """Explain a problem node or suggest solutions for it.

    Args:
        node_id: Node ID.
        mode: "explain" or "solve".
    """
    if mode not in ("explain", "solve"):
        return {"error": f"Invalid mode '{mode}'. Expected 'explain' or 'solve'."}
    assist_mode: AssistMode = "explain" if mode == "explain" else "solve"
    reply = assist.ask(node_id, assist_mode)
    if reply is None:
        return {"error": f"Node '{node_id}' not found."}
    return {"title": reply.title, "content": reply.content, "success": reply.ok}


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    store: TreeStore
    api: DiagnosisApi
    resolver: SearchResolver
    assist: AssistClient


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Load the tree and open the HTTP session on startup."""
    store = default_store()
    api = DiagnosisApi()
    logger.info("Diagnosis tree loaded: {} nodes", len(store))
    try:
        yield ServerContext(
            store=store,
            api=api,
            resolver=SearchResolver(api, store=store),
            assist=AssistClient(api, store),
        )
    finally:
        api.sess.close()


mcp_server = FastMCP(
    "diagnosis-map",
    instructions="""\
The diagnosis map is a tree of business problems. The root is "DON'T HAVE
ENOUGH MONEY"; each child is a more specific cause of its parent.

## Best Practice

1. Use diagnosis_search_tool with the user's own words to find the closest node.
2. Call diagnosis_get_node_context_tool on the match to see where it sits.
3. Use diagnosis_read_subtree_tool with max_depth=2 to list sub-causes.
4. Use diagnosis_explain_tool with mode="explain" or mode="solve" for advice.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def diagnosis_search_tool(
    ctx: Context, query: str = "", reveal: bool = False
) -> dict[str, Any]:
    """Find the diagnosis node that best matches a business problem description.

    Confidence is advisory; the match is returned however low it is.

    Args:
        query: Free-text problem description.
        reveal: Also return the outline with the path to the match expanded.
    """
    server = _ctx(ctx)
    return diagnosis_search(server.store, server.resolver, query=query, reveal=reveal)


@mcp_server.tool()
async def diagnosis_find_node_tool(ctx: Context, node_id: str) -> dict[str, Any]:
    """Look up a diagnosis node by id.

    Args:
        node_id: Node ID.
    """
    return diagnosis_find_node(_ctx(ctx).store, node_id=node_id)


@mcp_server.tool()
async def diagnosis_get_node_context_tool(
    ctx: Context, node_id: str, sibling_count: int = 3
) -> dict[str, Any]:
    """Get a node with its breadcrumbs, siblings, and children.

    Args:
        node_id: Node ID from search results.
        sibling_count: Siblings before/after to include.
    """
    return diagnosis_get_node_context(_ctx(ctx).store, node_id=node_id, sibling_count=sibling_count)


@mcp_server.tool()
async def diagnosis_read_subtree_tool(
    ctx: Context,
    node_id: str = ROOT_ID,
    max_depth: int | None = None,
    output_format: str = "markdown",
) -> dict[str, Any]:
    """Read a node and its sub-causes as markdown or structured JSON.

    Args:
        node_id: Node ID to read (default: the root).
        max_depth: Max depth levels (None = unlimited).
        output_format: "markdown" (human-readable) or "json" (structured).
    """
    return diagnosis_read_subtree(
        _ctx(ctx).store, node_id=node_id, max_depth=max_depth, output_format=output_format
    )


@mcp_server.tool()
async def diagnosis_explain_tool(
    ctx: Context, node_id: str, mode: str = "explain"
) -> dict[str, Any]:
    """Explain a problem node, or suggest easy/medium/hard ideas to solve it.

    Args:
        node_id: Node ID.
        mode: "explain" or "solve".
    """
    return diagnosis_explain(_ctx(ctx).assist, node_id=node_id, mode=mode)


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from diagnosis_map.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
