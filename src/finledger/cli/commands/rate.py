"""Exchange-rate lookup command."""

import click
from finledger.domain.currency import supported_codes
from finledger.domain.exchange_rates import create_exchange_rate_client


@click.command("rate")
@click.argument("from_currency", type=click.Choice(supported_codes(), case_sensitive=False))
@click.argument("to_currency", required=False, type=click.Choice(supported_codes(), case_sensitive=False))
@click.pass_context
def rate(ctx, from_currency: str, to_currency: str | None):
    """Look up the current exchange rate.

    TO_CURRENCY defaults to the base currency.

    Examples:
        finledger rate USD
        finledger rate EUR USD
    """
    to_currency = (to_currency or ctx.obj["base_currency"]).upper()
    from_currency = from_currency.upper()

    client = ctx.obj.get("rate_client")
    if client is None and from_currency != to_currency:
        click.echo("Error: Exchange-rate lookup is disabled (--offline).", err=True)
        ctx.exit(1)
    client = client or create_exchange_rate_client()

    result = client.get_rate(from_currency, to_currency)
    if not result:
        click.echo(f"Error: Exchange rate {from_currency}->{to_currency} is unavailable.", err=True)
        ctx.exit(1)
    click.echo(f"1 {from_currency} = {result} {to_currency}")


def register_commands(cli):
    """Register rate command with main CLI."""
    cli.add_command(rate)
