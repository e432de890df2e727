import logging
import sys

import click

from musichub.db.migrations import initialize_database
from musichub.server import settings
from musichub.server.seed import seed_from_json, seed_library


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@click.group()
@click.option('--data-dir', type=click.Path(file_okay=False), help='Directory holding musichub.sqlite3')
@click.option('--media-dir', type=click.Path(file_okay=False), help='Directory served under /media')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, data_dir, media_dir, verbose):
    """MusicHub backend: REST API and catalog tools."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj['data_dir'] = data_dir or str(settings.DATA_DIR)
    ctx.obj['media_dir'] = media_dir or str(settings.MEDIA_DIR)


@cli.command()
@click.option('--host', default=settings.HOST, show_default=True)
@click.option('--port', default=settings.PORT, type=int, show_default=True)
@click.option('--debug', is_flag=True, help='Run the Flask debug server')
@click.pass_context
def run(ctx, host, port, debug):
    """Serve the REST API."""
    from musichub.server.app import create_app

    app = create_app(ctx.obj['data_dir'], ctx.obj['media_dir'])
    click.echo(click.style(f"MusicHub API on http://{host}:{port}/api", fg='green', bold=True))
    app.run(host=host, port=port, debug=debug)


@cli.command()
@click.option('--scan/--no-scan', default=True, help='Scan the media directory for audio files')
@click.option('--json', 'json_path', type=click.Path(exists=True, dir_okay=False), help='JSON file with songs and playlists')
@click.option('--cover', default=None, help='Cover URL for scanned songs')
@click.pass_context
def seed(ctx, scan, json_path, cover):
    """Fill the catalog from the media directory and/or a JSON file."""
    db = initialize_database(ctx.obj['data_dir'])
    try:
        if scan:
            media_dir = ctx.obj['media_dir']
            with click.progressbar(length=0, label='Scanning media') as bar:
                def on_progress(progress):
                    bar.length = progress.files_count
                    bar.update(1)

                added = seed_library(db, media_dir, cover=cover or settings.DEFAULT_COVER, on_progress=on_progress)
            click.echo(f"Added {added} songs from {media_dir}")

        if json_path:
            songs, playlists = seed_from_json(db, json_path)
            click.echo(f"Added {songs} songs and {playlists} playlists from {json_path}")
    except (OSError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg='red'), err=True)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    cli()
