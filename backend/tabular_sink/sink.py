"""
Tabular Sink Façade

`submit()` is the single "write one record" operation:

    locate -> provision (absent) | ensure header (present)
           -> append -> style the appended row -> AppendedRecord

Partial side effects (a created but empty tab, an unstyled row) are left in
place; there is no rollback. Styling after the append is best-effort: the
values are already stored, so a styling failure only clears `styled`.
"""

import logging
from typing import Any, Mapping, Optional

from export_shared.exceptions import BackendUnavailable, SchemaMismatch, SinkError
from export_shared.interfaces.tabular_store import TabularStore

from .appender import RowAppender
from .layout import SheetLayout
from .locator import TableLocatorService
from .models import (
    DEFAULT_STYLE_TEMPLATE,
    AppendedRecord,
    CellRegion,
    StyleRole,
    StyleTemplate,
    SubmissionSchema,
    TableLocator,
)
from .provisioner import TableProvisioner
from .styling import apply_style

logger = logging.getLogger(__name__)


class TabularSink:
    def __init__(
        self,
        store: TabularStore,
        workbook_id: str,
        *,
        template: StyleTemplate = DEFAULT_STYLE_TEMPLATE,
        layout: Optional[SheetLayout] = None,
    ):
        if not workbook_id:
            raise ValueError("workbook_id is required")
        self._store = store
        self.workbook_id = workbook_id
        self.template = template
        self.layout = layout or SheetLayout()
        self.locator = TableLocatorService(store, workbook_id)
        self.provisioner = TableProvisioner(store, workbook_id, self.locator, self.layout)
        self.appender = RowAppender(store, workbook_id, self.layout)

    async def submit(
        self, table_name: str, schema: SubmissionSchema, values: Mapping[str, Any]
    ) -> AppendedRecord:
        """
        Append one record to the table named `table_name`

        Raises:
            SchemaMismatch: invalid table name or record; nothing is written
            BackendUnavailable: a workbook call failed (BackendTimeout: outcome unknown)
            PartialProvision: the table exists but its header could not be completed
        """
        if not table_name or not table_name.strip():
            raise SchemaMismatch("A table name is required", schema_name=schema.name)
        row = schema.align(values)

        try:
            locator = await self._resolve_table(table_name, schema)
            region, confirmed = await self.appender.append_record(locator, row)
        except SinkError:
            raise
        except Exception as e:
            raise BackendUnavailable(
                f"Unexpected failure while writing to '{table_name}'",
                details={"error": type(e).__name__},
            ) from e

        styled = await self._style_appended(locator, region, schema)
        logger.info(
            f"Appended {schema.name} record to '{table_name}' at row {region.display_row}"
            f"{'' if confirmed else ' (position unconfirmed)'}"
        )
        return AppendedRecord(
            table_name=table_name,
            region=region,
            values=row,
            position_confirmed=confirmed,
            styled=styled,
        )

    async def _resolve_table(self, table_name: str, schema: SubmissionSchema) -> TableLocator:
        locator = await self.locator.locate(table_name)
        if locator is None:
            return await self.provisioner.provision(table_name, schema, self.template)
        await self.provisioner.ensure_header(locator, schema, self.template)
        return locator

    async def _style_appended(
        self, locator: TableLocator, region: CellRegion, schema: SubmissionSchema
    ) -> bool:
        row_region = CellRegion(locator.table_id, region.row_start, region.row_end, 0, schema.width)
        try:
            requests = apply_style(row_region, self.template, StyleRole.APPENDED_ROW, schema.column_classes)
            await self._store.batch_format(self.workbook_id, requests)
        except BackendUnavailable as e:
            logger.warning(
                f"Row {region.display_row} of '{locator.table_name}' stored but not styled: "
                f"[{e.code}] {e.message}"
            )
            return False
        except Exception as e:
            # The row is stored; an unclassified styling error must not fail the submission
            logger.exception(
                f"Row {region.display_row} of '{locator.table_name}' stored but not styled: {type(e).__name__}"
            )
            return False
        return True
