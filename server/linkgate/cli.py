# server/linkgate/cli.py

import json
from datetime import datetime

import click
from flask.cli import AppGroup

from linkgate.extensions import db
from linkgate.models.click_event import ClickEvent
from linkgate.models.short_link import ShortLink
from linkgate.services.link_service import LinkService
from linkgate.utils.base_url import build_short_url

links_cli = AppGroup("links", help="Manage short links.")


@links_cli.command("sweep-expired")
def sweep_expired_command():
    """Deactivate every link whose expiration has passed."""
    count = LinkService.sweep_expired()
    click.echo(f"Deactivated {count} expired link(s)")


@links_cli.command("create")
@click.argument("destination")
@click.option("--code", default=None, help="Custom short code.")
@click.option("--alias", default=None, help="Alternate lookup key.")
@click.option("--password", default=None, help="Require this password before redirecting.")
@click.option("--expires", default=None, help="ISO-8601 expiration timestamp (UTC).")
@click.option("--splash", default=None, help="Splash image URL.")
@click.option("--loading-text", default=None)
@click.option("--rule", "rules", multiple=True, help='Destination rule as JSON, e.g. {"url": "...", "rule": "device:mobile", "weight": 2}.')
def create_link_command(destination, code, alias, password, expires, splash, loading_text, rules):
    """Create a short link pointing at DESTINATION."""
    expires_at = None
    if expires:
        try:
            expires_at = datetime.fromisoformat(expires.replace("Z", "+00:00"))
        except ValueError:
            raise click.BadParameter("Invalid expiration date format", param_hint="--expires")
        if expires_at.tzinfo is not None:
            expires_at = expires_at.replace(tzinfo=None) - expires_at.utcoffset()

    destinations = []
    for raw in rules:
        try:
            destinations.append(json.loads(raw))
        except ValueError:
            raise click.BadParameter(f"Not valid JSON: {raw}", param_hint="--rule")

    link, error = LinkService.create_link(
        destination_url=destination,
        code=code,
        alias=alias,
        password=password,
        expires_at=expires_at,
        destinations=destinations,
        splash_asset=splash,
        loading_text=loading_text,
    )

    if error:
        raise click.ClickException(error)

    click.echo(build_short_url(link.code))


@links_cli.command("show")
@click.argument("code")
@click.option("--clicks", "recent", default=10, show_default=True, help="Number of recent clicks to include.")
def show_link_command(code, recent):
    """Print a link, its rules and its most recent clicks as JSON."""
    link = ShortLink.query.filter(db.or_(ShortLink.code == code, ShortLink.alias == code)).first()
    if not link:
        raise click.ClickException(f"No link with code or alias {code!r}")

    data = link.to_dict()
    data["short_url"] = build_short_url(link.code)
    data["recent_clicks"] = [
        event.to_dict()
        for event in link.click_events.order_by(ClickEvent.clicked_at.desc()).limit(recent)
    ]

    click.echo(json.dumps(data, indent=2))
