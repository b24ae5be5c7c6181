"""
Flask CLI commands.

Commands:
- flask init-db: Create the database tables
- flask seed-catalog FILE --account ID: Load supplier price lists from JSON
"""

import json

import click

from tradedesk.database import create_all
from tradedesk.exceptions import TradeDeskError
from tradedesk.repositories.sql import SqlCatalogRepository
from tradedesk.services.catalog_service import add_supplier, update_supplier


def init_cli_commands(app):
    """Register CLI commands with Flask app."""
    
    @app.cli.command('init-db')
    def init_db_command():
        """Create all tables that do not exist yet."""
        create_all()
        click.echo(click.style('✅ Database tables created.', fg='green'))
    
    @app.cli.command('seed-catalog')
    @click.argument('file', type=click.File('r', encoding='utf-8'))
    @click.option('--account', required=True, help='Account id that owns the catalog')
    def seed_catalog(file, account):
        """
        Load suppliers from a JSON list into an account's catalog.
        
        Existing suppliers with the same name are replaced.
        """
        try:
            records = json.load(file)
        except json.JSONDecodeError as e:
            raise click.ClickException(f'Invalid JSON: {e}')
        if isinstance(records, dict):
            records = [records]
        
        repository = SqlCatalogRepository(account)
        entries = repository.load()
        known = {entry.name for entry in entries}
        saved = failed = 0
        
        for index, raw in enumerate(records):
            name = (raw.get('name') or '').strip()
            try:
                if name in known:
                    entry = update_supplier(repository, entries, name, raw)
                else:
                    entry = add_supplier(repository, entries, raw)
                    known.add(entry.name)
                entries = repository.load()
                saved += 1
                click.echo(f'   {entry.name}: {len(entry.steel_tiers)} steel tiers, '
                           f'cement={"yes" if entry.cement else "no"}')
            except TradeDeskError as e:
                failed += 1
                detail = ', '.join((e.payload or {}).get('fields', [])) or e.message
                click.echo(click.style(f'❌ Record {index} ({name or "no name"}): {detail}', fg='red'))
        
        color = 'green' if not failed else 'yellow'
        click.echo(click.style(f'\n{saved} suppliers saved, {failed} rejected for account {account}.', fg=color, bold=True))
