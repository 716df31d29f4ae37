"""CLI entry point for gridchart."""

from __future__ import annotations

import logging
import sys

import click

from gridchart import __version__, render_flowchart
from gridchart.errors import ChartError
from gridchart.types import Config


def _parse_size(ctx: click.Context, param: click.Parameter, value: str | None) -> tuple[float, float] | None:
    if value is None:
        return None
    tokens = value.split(",")
    if len(tokens) != 2:
        raise click.BadParameter('size should have the format "W,H"')
    try:
        width, height = float(tokens[0]), float(tokens[1])
    except ValueError:
        raise click.BadParameter(f"cannot parse '{value}' as two numbers") from None
    if width <= 0 or height <= 0:
        raise click.BadParameter("width and height must be positive")
    return width, height


def _check_stylesheets(ctx: click.Context, param: click.Parameter, value: tuple[str, ...]) -> tuple[str, ...]:
    if "-" in value:
        raise click.BadParameter("stylesheets must be files; \"-\" is only accepted as INPUT")
    return value


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


@click.command()
@click.argument("input", type=click.Path(allow_dash=True, dir_okay=False))
@click.option("--output", "-o", "output", type=str, default=None, help="Write output to this file instead of stdout")
@click.option("--node", "-n", "node_size", callback=_parse_size, default=None, help="Node width and height (W,H; default 200,100)")
@click.option("--gap", "-g", "gap_size", callback=_parse_size, default=None, help="Grid gap width and height (W,H; default 50,50)")
@click.option("--css", "css_files", multiple=True, type=click.Path(dir_okay=False), callback=_check_stylesheets, help="Stylesheet to embed after the default one (repeatable)")
@click.option("--no-default-css", is_flag=True, help="Do not embed the built-in stylesheet")
@click.option("--verbose", "-v", is_flag=True, help="Log pipeline details to stderr")
@click.version_option(__version__, prog_name="gridchart")
def main(
    input: str,
    output: str | None,
    node_size: tuple[float, float] | None,
    gap_size: tuple[float, float] | None,
    css_files: tuple[str, ...],
    no_default_css: bool,
    verbose: bool,
) -> None:
    """Compile a gridchart flowchart (INPUT, or - for stdin) to SVG."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        text = _read_text(input)
    except OSError as e:
        click.echo(f"error: cannot read '{input}': {e}", err=True)
        sys.exit(1)

    stylesheets = []
    for path in css_files:
        try:
            stylesheets.append(_read_text(path))
        except OSError as e:
            click.echo(f"error: cannot read stylesheet '{path}': {e}", err=True)
            sys.exit(1)

    node_width, node_height = node_size or (200, 100)
    gap_x, gap_y = gap_size or (50, 50)
    config = Config(
        node_width=node_width,
        node_height=node_height,
        gap_x=gap_x,
        gap_y=gap_y,
        css=tuple(stylesheets),
        default_css=not no_default_css,
    )

    try:
        rendered = render_flowchart(text, config)
    except ChartError as e:
        click.echo(f"error: {e.kind}: {e}", err=True)
        sys.exit(1)

    if output:
        try:
            with open(output, "w", encoding="utf-8") as f:
                f.write(rendered)
        except OSError as e:
            click.echo(f"error: cannot write '{output}': {e}", err=True)
            sys.exit(1)
    else:
        click.echo(rendered, nl=False)


if __name__ == "__main__":
    main()
