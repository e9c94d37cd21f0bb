"""CLI entry point for graphdump."""

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from graphdump import query
from graphdump.bgv import GraphFile
from graphdump.core.exceptions import GraphdumpError
from graphdump.passes import PassOptions

app = typer.Typer(
    name="graphdump",
    help="Inspect and simplify BGV compiler graph dumps.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

FileArg = Annotated[
    Path, typer.Argument(help="BGV file (optionally gzipped)", exists=True, dir_okay=False)
]
IndexArg = Annotated[int, typer.Argument(help="Graph index within the file")]
JsonOpt = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]
LenientOpt = Annotated[bool, typer.Option("--lenient", help="Skip unknown top-level records")]


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log decoder and pass activity")
    ] = False,
) -> None:
    """Inspect and simplify BGV compiler graph dumps."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )


def run(action: Any) -> Any:
    """Call ``action``, turning graphdump errors into a clean exit."""
    try:
        return action()
    except GraphdumpError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e


def print_json(value: Any) -> None:
    print(json.dumps(value))


@app.command("list")
def list_graphs(file: FileArg, output_json: JsonOpt = False, lenient: LenientOpt = False) -> None:
    """List the graphs in a file."""
    graphs = run(lambda: query.list_graphs(GraphFile(file, lenient=lenient)))

    if output_json:
        print_json(graphs)
        return
    if not graphs:
        console.print(f"No graphs in [cyan]{file}[/cyan]")
        return
    for graph in graphs:
        console.print(f"[dim]{graph['index']:>4}[/]  {escape(graph['name'])}")


@app.command()
def info(
    file: FileArg, index: IndexArg, output_json: JsonOpt = False, lenient: LenientOpt = False
) -> None:
    """Show node and edge counts and the structural summary of a graph."""
    result = run(lambda: query.graph_info(GraphFile(file, lenient=lenient), index))

    if output_json:
        print_json(result)
        return
    console.print(f"[bold cyan]{escape(result['name'])}[/] [dim](graph {result['index']})[/]")
    console.print(f"  Nodes: {result['nodes']}")
    console.print(f"  Edges: {result['edges']}")
    console.print(f"  Features: {', '.join(result['features']) or 'none'}")
    if result["node_classes"]:
        table = Table("Class", "Count", show_edge=False, box=None, padding=(0, 2))
        for name, count in result["node_classes"].items():
            table.add_row(name, str(count))
        console.print(table)


@app.command()
def node(
    file: FileArg,
    index: IndexArg,
    node_id: Annotated[int, typer.Argument(help="Node id")],
    output_json: JsonOpt = False,
    lenient: LenientOpt = False,
) -> None:
    """Show the properties of a node."""
    props = run(lambda: query.node_properties(GraphFile(file, lenient=lenient), index, node_id))

    if output_json:
        print_json(props)
        return
    for key, value in props.items():
        console.print(f"[cyan]{key}[/]: {escape(str(value))}")


@app.command()
def edge(
    file: FileArg,
    index: IndexArg,
    from_id: Annotated[int, typer.Argument(help="Source node id")],
    to_id: Annotated[int, typer.Argument(help="Destination node id")],
    output_json: JsonOpt = False,
    lenient: LenientOpt = False,
) -> None:
    """Show the properties of the edges between two nodes."""
    dump = GraphFile(file, lenient=lenient)
    edges = run(lambda: query.edge_properties(dump, index, from_id, to_id))

    if output_json:
        print_json(edges)
        return
    for props in edges:
        line = ", ".join(f"[cyan]{key}[/]={escape(str(value))}" for key, value in props.items())
        console.print(line)


@app.command()
def edges(
    file: FileArg,
    index: IndexArg,
    node_id: Annotated[int, typer.Argument(help="Node id")],
    output_json: JsonOpt = False,
    lenient: LenientOpt = False,
) -> None:
    """Show the input and output edges of a node."""
    result = run(lambda: query.node_edges(GraphFile(file, lenient=lenient), index, node_id))

    if output_json:
        print_json(result)
        return
    for direction in ("inputs", "outputs"):
        console.print(f"[green]{direction.capitalize()}:[/]")
        if not result[direction]:
            console.print("  [dim]none[/]")
        for item in result[direction]:
            text = f"{item['from']} ({item['from_label']}) -> {item['to']} ({item['to_label']})"
            console.print(f"  {escape(text)} [dim]{escape(item['name'] or '')}[/]")


@app.command()
def source(
    file: FileArg,
    index: IndexArg,
    node_id: Annotated[int, typer.Argument(help="Node id")],
    output_json: JsonOpt = False,
    lenient: LenientOpt = False,
) -> None:
    """Show the source position chain of a node."""
    lines = run(lambda: query.source_positions(GraphFile(file, lenient=lenient), index, node_id))

    if output_json:
        print_json(lines)
        return
    if not lines:
        console.print("[dim]No source position[/]")
    for line in lines:
        console.print(escape(line))


@app.command()
def simplify(
    file: FileArg,
    index: IndexArg,
    show_frame_state: Annotated[
        bool, typer.Option("--show-frame-state", help="Keep frame states")
    ] = False,
    hide_pi: Annotated[bool, typer.Option("--hide-pi", help="Splice out Pi nodes")] = False,
    hide_floating: Annotated[
        bool, typer.Option("--hide-floating", help="Hide floating nodes")
    ] = False,
    no_reduce_edges: Annotated[
        bool, typer.Option("--no-reduce-edges", help="Do not inline constants and parameters")
    ] = False,
    output_json: JsonOpt = False,
    lenient: LenientOpt = False,
) -> None:
    """Run the pass pipeline on a graph and show what a renderer would draw."""
    options = PassOptions(
        hide_frame_state=not show_frame_state,
        hide_pi=hide_pi,
        hide_floating=hide_floating,
        reduce_edges=not no_reduce_edges,
    )
    result = run(lambda: query.graph_view(GraphFile(file, lenient=lenient), index, options))

    if output_json:
        print_json(result)
        return
    passes = ", ".join(result["passes"])
    console.print(f"[bold cyan]{escape(result['name'])}[/] [dim](passes: {passes})[/]")
    for item in result["nodes"]:
        label = escape(str(item["label"]))
        console.print(f"  [cyan]{item['id']:>4}[/] {label} [dim]{item['kind']}[/]")
    counts = f"Drawn nodes: {len(result['nodes'])} | Drawn edges: {len(result['edges'])}"
    console.print(f"\n[dim]{counts} | Ranks: {len(result['ranks'])}[/]")


if __name__ == "__main__":
    app()
