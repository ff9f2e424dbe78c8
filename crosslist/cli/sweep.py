# crosslist/cli/sweep.py
import asyncio
import click

from crosslist.cli.engine import load_engine
from crosslist.database import dispose_engine


@click.command()
@click.option("--auto-relist/--no-auto-relist", default=None,
              help="Relist renewable expired listings after the sweep (default: AUTO_RELIST_ENABLED)")
def sweep(auto_relist):
    """Mark expired listings as expired"""

    async def _sweep():
        engine = await load_engine()
        try:
            transitioned = engine.lifecycle.sweep_expired()
            click.echo(f"{transitioned} listing(s) marked expired")

            enabled = engine.bulk.auto_relist.enabled if auto_relist is None else auto_relist
            if enabled:
                result = engine.bulk.auto_relist.run()
                click.echo(f"{result.processed} listing(s) auto-relisted, {result.failed} failed")

            saved = await engine.store.save()
            click.echo(f"Saved {saved} item(s)")
        finally:
            await dispose_engine()

    asyncio.run(_sweep())


if __name__ == "__main__":
    sweep()
