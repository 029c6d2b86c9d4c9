from typing import Optional

from graphviz import Digraph  # type: ignore

from . import cli
from .flags import FlagType, Schema, arity, flag


def build(schema: Optional[Schema] = None) -> Digraph:
    """
    Builds a diagram of the parse state machine.

    Without a schema the diagram shows the generic transitions. With one,
    every Boolean flag becomes a loop on `ReadingName` and every
    value-bearing flag gets its own `ReadingValue` node.
    """
    g = Digraph("flagkit", filename="machine.gv")

    g.attr("graph", rankdir="LR")
    g.attr("node", shape="ellipse")
    g.attr("graph", label="<<B>Flag State Machine</B>>", labelloc="t")

    g.node("ReadingName", shape="box", style="filled", fillcolor="lightblue")
    g.node("Done", shape="doublecircle", style="filled", fillcolor="lightgrey")
    g.node("ParseError", shape="doublecircle", style="filled", fillcolor="#f4cccc")

    g.edge("ReadingName", "Done", label="end of input")
    g.edge("ReadingName", "ParseError", label="malformed flag")
    g.edge("ReadingName", "ParseError", label="unknown flag")

    if schema is None:
        g.node("ReadingValue", shape="box")
        g.edge("ReadingName", "ReadingName", label="boolean flag")
        g.edge("ReadingName", "ReadingValue", label="int32 / string flag")
        g.edge("ReadingValue", "ReadingName", label="value")
        g.edge("ReadingValue", "ParseError", label="missing / bad value")
        return g

    for f in schema.flags:
        if arity(f.type) == 0:
            g.edge("ReadingName", "ReadingName", label=f"-{f.name}")
            continue

        node = f"ReadingValue({f.name})"
        g.node(node, f"<<B>ReadingValue</B><BR/>-{f.name} &lt;{f.type.value}&gt;>", shape="box")
        g.edge("ReadingName", node, label=f"-{f.name}")
        g.edge(node, "ReadingName", label="value")
        g.edge(node, "ParseError", label="missing value")
        if f.type == FlagType.INT32:
            g.edge(node, "ParseError", label="bad value")

    return g


class GraphArgs:
    schema: str = flag("schema", "Flag schema to expand, e.g. 'l:bool,p:int32'")
    output: str = flag("output", "Where to write the Graphviz source")
    view: bool = flag("view", "Render and open the diagram")


@cli.command("g", "graph", "Show the parse state machine as a graph")
def graphCmd(args: GraphArgs):
    schema = Schema.fromSpec(args.schema) if args.schema else None
    g = build(schema)
    output = args.output or "machine.gv"

    if args.view:
        g.view(filename=output)
    else:
        g.save(filename=output)
        print(f"Wrote {output}")
