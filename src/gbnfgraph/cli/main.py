"""
Main CLI entry point.
"""

import click
import logging

__version__ = "0.1.0"


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def _load_graph(path, grammar):
    from gbnfgraph.core import GrammarGraph

    try:
        return GrammarGraph.load(path, grammar=grammar)
    except ValueError as e:
        raise click.ClickException(str(e))


def _load_config(config_path):
    from gbnfgraph.grammar import CompilerConfig

    if config_path:
        return CompilerConfig.from_config_file(config_path)
    return CompilerConfig()


def _report_problems(problems):
    click.echo("Grammar is incomplete. Some nodes are not properly connected:", err=True)
    for name in problems:
        click.echo(f"  - {name}", err=True)


@click.group()
@click.version_option(version=__version__)
def main():
    """gbnfgraph: compile grammar diagrams into GBNF."""
    pass


@main.command("compile")
@click.argument("graph", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(), help="Output file or directory (default: stdout)")
@click.option("--grammar", "-g", help="Saved grammar id or name when GRAPH holds a list")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Compiler config file")
@click.option("--no-optimize", is_flag=True, help="Emit the unoptimized rule set")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
def compile_command(graph, output, grammar, config_path, no_optimize, verbose):
    """Compile a saved grammar diagram into GBNF."""
    from pathlib import Path

    from gbnfgraph.core import GraphValidationError, export_filename
    from gbnfgraph.grammar import GrammarCompiler

    _setup_logging(verbose)
    logger = logging.getLogger(__name__)

    config = _load_config(config_path)
    if no_optimize:
        config.optimize = False

    diagram = _load_graph(graph, grammar)
    compiler = GrammarCompiler(config)

    try:
        result = compiler.compile(diagram)
    except GraphValidationError as e:
        _report_problems(e.report.problems)
        click.get_current_context().exit(1)

    if output is None:
        click.echo(result.grammar)
        return

    output_path = Path(output)
    if output_path.is_dir():
        output_path = output_path / export_filename(diagram.name)

    output_path.write_text(result.grammar + "\n", encoding="utf-8")
    logger.info(f"Wrote {len(result.rule_set.rules)} rules to {output_path}")


@main.command("validate")
@click.argument("graph", type=click.Path(exists=True, dir_okay=False))
@click.option("--grammar", "-g", help="Saved grammar id or name when GRAPH holds a list")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
def validate_command(graph, grammar, verbose):
    """Check that every node in a diagram is connected."""
    from gbnfgraph.core import validate_graph

    _setup_logging(verbose)

    diagram = _load_graph(graph, grammar)
    report = validate_graph(diagram.nodes, diagram.edges)

    if not report.valid:
        _report_problems(report.problems)
        click.get_current_context().exit(1)

    click.echo("OK")


@main.command("cycles")
@click.argument("graph", type=click.Path(exists=True, dir_okay=False))
@click.option("--grammar", "-g", help="Saved grammar id or name when GRAPH holds a list")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Compiler config file")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
def cycles_command(graph, grammar, config_path, verbose):
    """Print the feedback edges the renderer draws as loops."""
    import json

    from gbnfgraph.analysis import find_feedback_edges, get_ranking

    _setup_logging(verbose)

    config = _load_config(config_path)
    try:
        ranking = get_ranking(config.ranking)
    except ValueError as e:
        raise click.ClickException(str(e))

    diagram = _load_graph(graph, grammar)
    analysis = find_feedback_edges(diagram.nodes, diagram.edges, ranking)

    click.echo(json.dumps({
        "feedback_edges": sorted(analysis.feedback_edges),
        "path_lengths": dict(sorted(analysis.path_lengths.items())),
    }, indent=2))


if __name__ == "__main__":
    main()
