# crosslist/cli/__init__.py
import click

from crosslist.cli.relist_expired import relist_expired
from crosslist.cli.stats import stats
from crosslist.cli.sweep import sweep
from crosslist.core.logging_config import configure_logging


@click.group()
def cli():
    """Crosslisting maintenance commands"""
    configure_logging()


cli.add_command(sweep)
cli.add_command(relist_expired)
cli.add_command(stats)
