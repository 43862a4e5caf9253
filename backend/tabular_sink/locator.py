"""
Table Locator

Resolves a table name to its backing tab. Every call re-reads the workbook: tabs
can be created, renamed or deleted by other requests and by people editing the
spreadsheet.
"""

import logging
from typing import Optional

from export_shared.interfaces.tabular_store import TabularStore

from .models import TableLocator

logger = logging.getLogger(__name__)


class TableLocatorService:
    def __init__(self, store: TabularStore, workbook_id: str):
        self._store = store
        self.workbook_id = workbook_id

    async def locate(self, table_name: str) -> Optional[TableLocator]:
        """
        Find the tab whose title equals `table_name` (case-sensitive)

        Returns:
            The locator, or None when no such tab exists

        Raises:
            BackendUnavailable: the workbook could not be listed
        """
        tables = await self._store.list_tables(self.workbook_id)
        for table in tables:
            if table.title == table_name:
                return TableLocator(
                    workbook_id=self.workbook_id,
                    table_id=table.sheet_id,
                    table_name=table.title,
                )
        logger.debug(f"No table named '{table_name}' among {len(tables)} tabs")
        return None
