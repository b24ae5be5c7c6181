"""
Integration tests for the Flask CLI commands.
"""

import json
from tradedesk.repositories.sql import SqlCatalogRepository


class TestSeedCatalog:
    """Tests for flask seed-catalog."""
    
    def test_seed_valid_and_invalid_records(self, app, session, account_id, tmp_path):
        path = tmp_path / 'catalog.json'
        path.write_text(json.dumps([
            {'name': 'Shree Steel', 'steelDetails': [{'diameter': '10mm', 'price': 650, 'qty': 1000}]},
            {'name': 'Broken', 'steel_tiers': [{'diameter': '8mm', 'price': -1, 'qty': 10}]},
        ]), encoding='utf-8')
        
        result = app.test_cli_runner().invoke(args=['seed-catalog', str(path), '--account', account_id])
        
        assert result.exit_code == 0
        assert '1 suppliers saved, 1 rejected' in result.output
        assert [entry.name for entry in SqlCatalogRepository(account_id).load()] == ['Shree Steel']
    
    def test_reseed_replaces_supplier(self, app, session, account_id, tmp_path):
        path = tmp_path / 'catalog.json'
        runner = app.test_cli_runner()
        for price in (650, 700):
            path.write_text(json.dumps({'name': 'Shree Steel', 'cement': {'price': price, 'qty': 10}}), encoding='utf-8')
            runner.invoke(args=['seed-catalog', str(path), '--account', account_id])
        
        entries = SqlCatalogRepository(account_id).load()
        
        assert len(entries) == 1
        assert entries[0].cement.price_per_batch == 700
    
    def test_invalid_json(self, app, account_id, tmp_path):
        path = tmp_path / 'catalog.json'
        path.write_text('{not json', encoding='utf-8')
        result = app.test_cli_runner().invoke(args=['seed-catalog', str(path), '--account', account_id])
        assert result.exit_code != 0


class TestInitDb:
    def test_init_db(self, app):
        result = app.test_cli_runner().invoke(args=['init-db'])
        assert result.exit_code == 0
        assert 'Database tables created' in result.output
