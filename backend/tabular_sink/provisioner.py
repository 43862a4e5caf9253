"""
Table Provisioner

Creates a backing table and gives it a header and default styling. Each step
tolerates a concurrent provisioner working on the same name:

1. create the tab; "already exists" counts as success
2. re-locate the tab (the create reply is only a fallback)
3. ensure the header: style first, then write the labels

The header write comes last so that a header in place means provisioning
finished. A table left without one (by a crash or a failed call) is completed
by the next request that touches it. An existing header is only ever extended,
never replaced with different labels.
"""

import logging
from typing import List, Optional

from export_shared.exceptions import BackendUnavailable, PartialProvision, TableAlreadyExists
from export_shared.interfaces.tabular_store import TabularStore
from export_shared.models.workbook import SheetProperties

from .layout import SheetLayout
from .locator import TableLocatorService
from .models import StyleRole, StyleTemplate, SubmissionSchema, TableLocator
from .styling import apply_style

logger = logging.getLogger(__name__)


class TableProvisioner:
    def __init__(
        self,
        store: TabularStore,
        workbook_id: str,
        locator: TableLocatorService,
        layout: SheetLayout,
    ):
        self._store = store
        self.workbook_id = workbook_id
        self._locator = locator
        self.layout = layout

    async def provision(
        self, table_name: str, schema: SubmissionSchema, template: StyleTemplate
    ) -> TableLocator:
        """
        Create `table_name` if needed and make sure its header is in place

        Raises:
            BackendUnavailable: a workbook call failed
            PartialProvision: the table could not be resolved after creation,
                or its header could not be completed
        """
        created: Optional[SheetProperties] = None
        already_exists = False
        try:
            created = await self._store.create_table(self.workbook_id, table_name)
            logger.info(f"Created table '{table_name}'")
        except TableAlreadyExists:
            already_exists = True
            logger.info(f"Table '{table_name}' was created concurrently; reusing it")

        locator = await self._locator.locate(table_name)
        if locator is None and created is not None:
            locator = TableLocator(
                workbook_id=self.workbook_id, table_id=created.sheet_id, table_name=created.title
            )
        if locator is None and already_exists:
            # Tab titles are unique regardless of case; lookup is exact
            raise PartialProvision(
                table_name,
                "the workbook reports the title as taken but no tab matches it exactly; "
                "a tab whose title differs only in letter case may exist",
            )
        if locator is None:
            raise PartialProvision(table_name, "table was created but cannot be located")

        await self.ensure_header(locator, schema, template)
        return locator

    async def ensure_header(
        self, locator: TableLocator, schema: SubmissionSchema, template: StyleTemplate
    ) -> bool:
        """
        Write header + provisioning style unless the header is already present

        Returns:
            True when the header was (re)written, False when it was already there

        Raises:
            PartialProvision: the header row holds different labels, or the
                style/header write failed
            BackendUnavailable: the header row could not be read
        """
        header_range = self.layout.header_range(locator, schema.width)
        rows = await self._store.get_values(self.workbook_id, header_range)
        existing = _trim([str(cell) for cell in rows[0]]) if rows else []
        labels = schema.labels

        if existing == labels:
            return False
        if existing and existing != labels[: len(existing)]:
            raise PartialProvision(
                locator.table_name,
                "header row holds different labels",
                details={"existing": existing, "expected": labels},
            )

        try:
            await self._store.batch_format(self.workbook_id, self.provisioning_requests(locator, schema, template))
            await self._store.write_range(self.workbook_id, header_range, [labels])
        except BackendUnavailable as e:
            raise PartialProvision(
                locator.table_name,
                "header or style write did not complete",
                details={"cause": e.code, **e.details},
            ) from e

        if existing:
            logger.info(f"Extended header of '{locator.table_name}' to {len(labels)} columns")
        else:
            logger.info(f"Wrote header for '{locator.table_name}' ({schema.name} v{schema.version})")
        return True

    def provisioning_requests(
        self, locator: TableLocator, schema: SubmissionSchema, template: StyleTemplate
    ) -> List[dict]:
        classes = schema.column_classes
        header_region = self.layout.header_region(locator.table_id, schema.width)
        body_region = self.layout.body_region(locator.table_id, schema.width)
        return apply_style(header_region, template, StyleRole.HEADER, classes) + apply_style(
            body_region, template, StyleRole.BODY_DEFAULT, classes
        )


def _trim(cells: List[str]) -> List[str]:
    while cells and not cells[-1].strip():
        cells.pop()
    return cells
