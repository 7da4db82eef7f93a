"""CLI for the diagnosis map (browse, layout, search, explain, MCP server)."""

import json
from typing import Annotated

import typer
from loguru import logger

from diagnosis_map.api import DiagnosisApi
from diagnosis_map.core.assist.client import AssistClient
from diagnosis_map.core.layout.engine import layout_bounds
from diagnosis_map.core.search.resolver import SearchResolver
from diagnosis_map.core.tree.loader import default_store
from diagnosis_map.core.tree.markdown import render_outline, render_subtree_as_markdown
from diagnosis_map.explorer import DiagnosisExplorer
from diagnosis_map.logging_config import configure_logging
from diagnosis_map.models.search import AssistMode, SearchMatch

app = typer.Typer(help="Diagnosis map: explore the business problem diagnostic tree.")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    api_base: Annotated[
        str | None,
        typer.Option(
            "--api-base", help="Base URL of the diagnosis API", envvar="DIAGNOSIS_MAP_API_BASE"
        ),
    ] = None,
    cache: bool = typer.Option(False, "--cache", "-C", help="Replay cached API responses"),
) -> None:
    configure_logging(verbose=verbose)
    ctx.obj = {"api_base": api_base, "cache": cache}


def _api(ctx: typer.Context) -> DiagnosisApi:
    opts = ctx.obj or {}
    return DiagnosisApi(base_url=opts.get("api_base"), from_cache=opts.get("cache", False))


def _require_node(node_id: str) -> None:
    if node_id not in default_store():
        typer.echo(f"Node '{node_id}' not found.")
        raise typer.Exit(1)


@app.command()
def tree(
    expand: Annotated[
        list[str] | None,
        typer.Option("--expand", "-e", help="Toggle these nodes open, in order"),
    ] = None,
    navigate: Annotated[
        str | None,
        typer.Option("--navigate", "-n", help="Reveal and highlight this node"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Show the currently visible part of the tree."""
    explorer = DiagnosisExplorer(default_store())
    for node_id in expand or []:
        _require_node(node_id)
        explorer.toggle(node_id)
    if navigate:
        _require_node(navigate)
        explorer.navigate_to(navigate)

    if output_json:
        graph = explorer.visible_graph()
        data = {
            "nodes": [
                {
                    "id": n.id,
                    "label": n.label,
                    "level": n.level,
                    "x": n.position.x,
                    "y": n.position.y,
                    "collapsed": n.collapsed,
                    "child_count": n.child_count,
                    "highlighted": n.highlighted,
                }
                for n in graph.nodes
            ],
            "edges": [{"id": e.id, "source": e.source, "target": e.target} for e in graph.edges],
        }
        typer.echo(json.dumps(data, indent=2))
        return

    typer.echo(
        render_outline(
            explorer.store,
            visible=explorer.visible_set(),
            collapsed=explorer.collapse.collapsed,
            highlighted=explorer.highlighted,
        ),
        nl=False,
    )


@app.command()
def outline(
    node: Annotated[str | None, typer.Option("--node", help="Start node id")] = None,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
) -> None:
    """Print the full tree (or a subtree) with node ids."""
    store = default_store()
    start = node or store.root_id
    _require_node(start)
    typer.echo(
        render_subtree_as_markdown(store, node_id=start, max_depth=max_depth, show_ids=True),
        nl=False,
    )


@app.command(name="node")
def node_cmd(node_id: str = typer.Argument(..., help="Node ID")) -> None:
    """Show a node with its breadcrumbs, siblings and children."""
    store = default_store()
    context = store.node_context(node_id)
    if context is None:
        typer.echo(f"Node '{node_id}' not found.")
        raise typer.Exit(1)

    n = context.node
    typer.echo(f"{n.label}  [id={n.id}, level={n.level}, {n.severity}]")
    if context.breadcrumbs:
        typer.echo("  path: " + " > ".join(b.label for b in context.breadcrumbs))
    for s in context.siblings_before:
        typer.echo(f"  before: {s.label} ({s.id})")
    for s in context.siblings_after:
        typer.echo(f"  after: {s.label} ({s.id})")
    for c in context.children:
        typer.echo(f"  - {c.label} ({c.id})")


@app.command()
def layout(
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Print the cached layout positions for the whole tree."""
    explorer = DiagnosisExplorer(default_store())
    positions = explorer.layout.positions
    width, height = layout_bounds(positions, explorer.layout.spacing)
    if output_json:
        data = {
            "width": width,
            "height": height,
            "positions": {k: {"x": p.x, "y": p.y} for k, p in positions.items()},
        }
        typer.echo(json.dumps(data, indent=2))
        return
    typer.echo(f"{len(positions)} nodes, {width:.0f} x {height:.0f}\n")
    for node_id, p in positions.items():
        typer.echo(f"  {node_id}: ({p.x:.0f}, {p.y:.0f})")


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Describe your business problem"),
    go: bool = typer.Option(False, "--go", "-g", help="Reveal the matched node"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Find the diagnosis node that best matches a problem description."""
    if not query.strip():
        typer.echo("Search query is empty.")
        raise typer.Exit(1)

    store = default_store()
    explorer = DiagnosisExplorer(store, resolver=SearchResolver(_api(ctx), store=store))
    outcome = explorer.search(query)
    if outcome is None:
        typer.echo("Search is not available.")
        raise typer.Exit(1)

    if output_json:
        data: dict[str, object] = {"kind": outcome.kind, "message": outcome.message}
        if isinstance(outcome, SearchMatch):
            data.update(
                node_id=outcome.node_id,
                label=outcome.label,
                confidence=outcome.confidence,
                reasoning=outcome.reasoning,
            )
        typer.echo(json.dumps(data, indent=2))
    elif isinstance(outcome, SearchMatch):
        typer.echo(f"Found: {outcome.label}  [id={outcome.node_id}]")
        typer.echo(f"Confidence: {outcome.confidence_percent}%")
        if outcome.reasoning:
            typer.echo(f"  {outcome.reasoning}")
    else:
        typer.echo(outcome.message)

    if outcome.kind == "transport_failure":
        raise typer.Exit(1)

    if go and isinstance(outcome, SearchMatch) and not output_json:
        if not explorer.go_to_result():
            logger.warning("Matched node {} is not in the tree", outcome.node_id)
            return
        typer.echo()
        typer.echo(
            render_outline(
                store,
                visible=explorer.visible_set(),
                collapsed=explorer.collapse.collapsed,
                highlighted=explorer.highlighted,
            ),
            nl=False,
        )


def _assist(ctx: typer.Context, node_id: str, mode: AssistMode) -> None:
    reply = AssistClient(_api(ctx), default_store()).ask(node_id, mode)
    if reply is None:
        typer.echo(f"Node '{node_id}' not found.")
        raise typer.Exit(1)
    typer.echo(reply.title)
    typer.echo()
    typer.echo(reply.content)
    if not reply.ok:
        raise typer.Exit(1)


@app.command()
def explain(ctx: typer.Context, node_id: str = typer.Argument(..., help="Node ID")) -> None:
    """Ask the assistant what a problem means and why it happens."""
    _assist(ctx, node_id, "explain")


@app.command()
def solve(ctx: typer.Context, node_id: str = typer.Argument(..., help="Node ID")) -> None:
    """Ask the assistant for easy, medium and hard ideas to fix a problem."""
    _assist(ctx, node_id, "solve")


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from diagnosis_map.mcp.server import run_mcp_server

    run_mcp_server()
