# crosslist/cli/stats.py
import asyncio
import click

from crosslist.cli.engine import load_engine
from crosslist.database import dispose_engine
from crosslist.services.health import fleet_stats


@click.command()
@click.option("--days", type=int, default=None, help="Expiry warning window (default: EXPIRY_WARNING_DAYS)")
def stats(days):
    """Show fleet-wide crosslisting totals and listings about to expire"""

    async def _stats():
        engine = await load_engine()
        try:
            warning_days = engine.settings.EXPIRY_WARNING_DAYS if days is None else days
            totals = fleet_stats(engine.store.all(), today=engine.lifecycle.today(), warning_days=warning_days)

            click.echo("\nCrosslisting stats:")
            click.echo(f"Active listings:        {totals.total_active}")
            click.echo(f"Expired listings:       {totals.total_expired}")
            click.echo(f"Expiring in {warning_days} days:   {totals.total_expiring_soon}")
            click.echo(f"Sold elsewhere:         {totals.total_sold_elsewhere}")
            click.echo(f"Items not listed:       {totals.items_not_listed}")
            click.echo(f"Single-platform items:  {totals.items_single_platform}")

            expiring = engine.lifecycle.expiring_listings(warning_days=warning_days)
            if expiring:
                click.echo("\nExpiring soon:")
                for match in expiring:
                    click.echo(f"  {match.item_id}\t{match.platform}\t{match.days_left} day(s) left")
        finally:
            await dispose_engine()

    asyncio.run(_stats())


if __name__ == "__main__":
    stats()
