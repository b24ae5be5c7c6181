"""
Unit tests for per-account workspaces.
"""

from decimal import Decimal
from tradedesk.domain import ItemKind
from tradedesk.services.workspace_service import WorkspaceRegistry, memory_repositories


class TestWorkspaceRegistry:
    """Tests for WorkspaceRegistry."""
    
    def test_one_workspace_per_account(self):
        registry = WorkspaceRegistry(memory_repositories)
        
        first = registry.get('acc-1')
        
        assert registry.get('acc-1') is first
        assert registry.get('acc-2') is not first
        assert len(registry) == 2
    
    def test_snapshots_follow_repository(self, catalog_entries):
        workspace = WorkspaceRegistry(memory_repositories).get('acc-1')
        for entry in catalog_entries:
            workspace.catalog_repository.save_supplier(entry)
        
        workspace.wizard.start_new()
        item = workspace.wizard.add_item(ItemKind.CEMENT, Decimal('2'), supplier_name='Ambuja Depot')
        
        assert len(workspace.catalog.entries) == 2
        assert item.line_total == Decimal('700.00')
    
    def test_close_drops_draft_and_subscriptions(self):
        registry = WorkspaceRegistry(memory_repositories)
        workspace = registry.get('acc-1')
        workspace.wizard.start_new()
        
        registry.close('acc-1')
        
        assert not workspace.wizard.store.has_draft
        assert len(registry) == 0
        assert len(workspace.catalog_repository.store.catalog_listeners) == 0
