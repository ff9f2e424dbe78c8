# crosslist/cli/relist_expired.py
import asyncio
import click

from crosslist.cli.engine import load_engine
from crosslist.database import dispose_engine


@click.command("relist-expired")
@click.option("--dry-run", is_flag=True, help="List what would be relisted without changing anything")
def relist_expired(dry_run):
    """Relist every expired listing of every in-stock item"""

    async def _relist():
        engine = await load_engine()
        try:
            if dry_run:
                in_stock = [i for i in engine.store.all() if i.in_stock]
                matches = engine.lifecycle.expired_listings(in_stock)
                for match in matches:
                    click.echo(f"{match.item_id}\t{match.platform}\texpired {match.expiry_date}")
                click.echo(f"{len(matches)} listing(s) would be relisted")
                return

            result = engine.bulk.bulk_relist_expired()
            await engine.store.save()
            click.echo(f"Relisted {result.processed} listing(s) across {len(result.item_ids)} item(s), {result.failed} failed")
        finally:
            await dispose_engine()

    asyncio.run(_relist())


if __name__ == "__main__":
    relist_expired()
