"""
Tabular Store Interface
Abstract interface for the remote workbook the sink writes into
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from export_shared.models.workbook import AppendResult, SheetProperties


class TabularStore(ABC):
    """
    Contract every destination workbook backend must satisfy.

    Implementations raise `BackendUnavailable` (or `BackendTimeout`) when a call
    does not complete, and `TableAlreadyExists` from `create_table` when the
    title is taken. Two guarantees are relied upon by the sink:

    - `create_table` is idempotent by name (a second create fails cleanly)
    - `append_to_range` is atomic per call (concurrent appends never overlap)
    """

    @abstractmethod
    async def list_tables(self, workbook_id: str) -> List[SheetProperties]:
        """Return the current tabs of the workbook (never cached)."""
        raise NotImplementedError

    @abstractmethod
    async def create_table(self, workbook_id: str, title: str) -> Optional[SheetProperties]:
        """
        Create a tab named `title`.

        Returns:
            The new tab's properties when the backend reports them, else None
        """
        raise NotImplementedError

    @abstractmethod
    async def get_values(self, workbook_id: str, a1_range: str) -> List[List[Any]]:
        """Read a range; trailing empty rows and cells may be omitted."""
        raise NotImplementedError

    @abstractmethod
    async def write_range(self, workbook_id: str, a1_range: str, values: Sequence[Sequence[Any]]) -> None:
        """Overwrite a range with raw (uninterpreted) values."""
        raise NotImplementedError

    @abstractmethod
    async def append_to_range(
        self, workbook_id: str, a1_range: str, values: Sequence[Sequence[Any]]
    ) -> AppendResult:
        """Atomically append rows after the table found at `a1_range`."""
        raise NotImplementedError

    @abstractmethod
    async def batch_format(self, workbook_id: str, requests: Sequence[Dict[str, Any]]) -> None:
        """Apply several formatting requests in one round trip."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release transport resources."""
        return None
