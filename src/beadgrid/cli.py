"""
Command-line interface for the bead grid editor.
"""

import sys

import click

from . import __version__
from .config import Config
from .errors import LoadError
from .session import EditorSession


def _make_session(config_path, **overrides) -> EditorSession:
    config = Config.from_yaml(config_path, **overrides)
    return EditorSession(config)


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    Bead Grid Editor

    Sample images onto a bead grid, reduce its colors, and export the result.
    """
    pass


@cli.command()
@click.argument('input_image', type=click.Path(exists=True))
@click.argument('output_json', type=click.Path())
@click.option('--config', '-c', default='config.yaml', help='Configuration file path')
@click.option('--cols', type=int, help='Grid columns')
@click.option('--rows', type=int, help='Grid rows')
@click.option('--geometry', '-g', type=click.Choice(['gem', 'hex']), help='Cell shape')
@click.option('--reduce', '-k', 'target', type=int, help='Reduce to this many colors after sampling')
def sample(input_image, output_json, config, cols, rows, geometry, target):
    """
    Sample an image onto a new grid and save it.

    INPUT_IMAGE: Path to input image (JPG/PNG supported)
    OUTPUT_JSON: Path for the saved grid file
    """
    try:
        session = _make_session(config, cols=cols, rows=rows, geometry=geometry)
        session.load_image(input_image)
        if target is not None:
            session.reduce_colors(target)
        session.save_grid(output_json)
    except (LoadError, ValueError, FileNotFoundError) as e:
        click.echo(f"[X] Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"[OK] Grid saved: {output_json} ({len(session.color_counts())} colors)")


@cli.command()
@click.argument('grid_json', type=click.Path(exists=True))
@click.argument('output_json', type=click.Path())
@click.option('--config', '-c', default='config.yaml', help='Configuration file path')
@click.option('--colors', '-k', 'target', type=int, help='Target color count')
def reduce(grid_json, output_json, config, target):
    """
    Reduce a saved grid to fewer colors.

    GRID_JSON: Saved grid file
    OUTPUT_JSON: Path for the reduced grid file
    """
    try:
        session = _make_session(config)
        session.load_grid(grid_json)
        reduced = session.reduce_colors(target)
        session.save_grid(output_json)
    except (LoadError, ValueError) as e:
        click.echo(f"[X] Error: {e}", err=True)
        sys.exit(1)

    if reduced is None:
        click.echo("[OK] No reduction needed")
    else:
        click.echo(f"[OK] Reduced to: {', '.join(reduced)}")


@cli.command()
@click.argument('grid_json', type=click.Path(exists=True))
@click.argument('output_png', type=click.Path())
@click.option('--config', '-c', default='config.yaml', help='Configuration file path')
@click.option('--mode', '-m', type=click.Choice(['full', 'colors', 'pixels']), default='full',
              help='full: outlined cells, colors: flat fills, pixels: one pixel per cell')
@click.option('--cell-size', type=float, help='Cell size in pixels')
def render(grid_json, output_png, config, mode, cell_size):
    """
    Render a saved grid to PNG.

    GRID_JSON: Saved grid file
    OUTPUT_PNG: Path for the PNG image
    """
    try:
        session = _make_session(config, cell_size_px=cell_size)
        session.load_grid(grid_json, keep_cell_size=cell_size is not None)
        image = session.export_png(output_png, mode)
    except (LoadError, ValueError) as e:
        click.echo(f"[X] Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"[OK] Rendered {image.size[0]}x{image.size[1]} PNG: {output_png}")


@cli.command()
@click.argument('grid_json', type=click.Path(exists=True))
@click.argument('output_json', type=click.Path())
@click.option('--config', '-c', default='config.yaml', help='Configuration file path')
@click.option('--name', default='Custom Palette', help='Palette name')
def palette(grid_json, output_json, config, name):
    """
    Export the palette stored with a saved grid.

    GRID_JSON: Saved grid file
    OUTPUT_JSON: Path for the palette file
    """
    try:
        session = _make_session(config)
        loaded = session.load_grid(grid_json)
        if loaded.palette is None:
            session.palette.set_from_histogram(session.color_counts())
        session.export_palette(output_json, name=name)
    except (LoadError, ValueError) as e:
        click.echo(f"[X] Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"[OK] Palette saved: {output_json}")


@cli.command()
@click.argument('grid_json', type=click.Path(exists=True))
@click.option('--config', '-c', default='config.yaml', help='Configuration file path')
def info(grid_json, config):
    """Show grid size and color usage."""
    try:
        session = _make_session(config)
        session.load_grid(grid_json)
    except (LoadError, ValueError) as e:
        click.echo(f"[X] Error: {e}", err=True)
        sys.exit(1)

    grid = session.grid
    counts = sorted(session.color_counts().items(), key=lambda item: item[1], reverse=True)
    click.echo(f"Grid: {grid.cols} x {grid.rows} ({grid.total_cells:,} cells, {session.geometry.name})")
    click.echo(f"Colors used: {len(counts)}")
    for color, count in counts:
        click.echo(f"  {color}: {count:>6,} ({count / grid.total_cells:6.1%})")


def main():
    """Main CLI entry point."""
    cli()


if __name__ == '__main__':
    main()
