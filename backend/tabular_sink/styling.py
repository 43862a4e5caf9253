"""
Styling Engine

Turns (region, template, role) into Sheets `batchUpdate` requests. The engine
performs no I/O and keeps no state; the caller sends the batch.

Roles:
- header:       header background/bold/font, borders, and column widths
- body-default: per column class wrap + font over the forward body region
- appended-row: per column class wrap + font (+ optional border) on one row

Column widths are only emitted for the header role, so appending rows never
undoes a manual resize.
"""

from typing import Any, Dict, List, Sequence, Tuple

from .models import BodyFormat, BorderStyle, CellRegion, ColumnClass, StyleRole, StyleTemplate

ColumnRun = Tuple[ColumnClass, int, int]


def column_runs(region: CellRegion, column_classes: Sequence[ColumnClass]) -> List[ColumnRun]:
    """
    Group adjacent columns that share a class

    `column_classes` is aligned with the region's columns. Returns
    (class, col_start, col_end) triples in absolute column indices.
    """
    if len(column_classes) != region.col_count:
        raise ValueError(
            f"Expected {region.col_count} column classes for the region, got {len(column_classes)}"
        )

    runs: List[ColumnRun] = []
    for offset, column_class in enumerate(column_classes):
        column = region.col_start + offset
        if runs and runs[-1][0] == column_class and runs[-1][2] == column:
            runs[-1] = (column_class, runs[-1][1], column + 1)
        else:
            runs.append((column_class, column, column + 1))
    return runs


def apply_style(
    region: CellRegion,
    template: StyleTemplate,
    role: StyleRole,
    column_classes: Sequence[ColumnClass],
) -> List[Dict[str, Any]]:
    """Build the formatting requests for one region and role"""
    role = StyleRole(role)
    runs = column_runs(region, column_classes)

    if role is StyleRole.HEADER:
        return _header_requests(region, template, runs)
    if role is StyleRole.BODY_DEFAULT:
        return _body_requests(region, template, runs)
    requests = _body_requests(region, template, runs)
    if template.body_border is not None:
        requests.append(_borders_request(region, template.body_border))
    return requests


def _header_requests(
    region: CellRegion, template: StyleTemplate, runs: List[ColumnRun]
) -> List[Dict[str, Any]]:
    header = template.header_format
    text_format: Dict[str, Any] = header.font.to_api() if header.font else {}
    text_format["bold"] = header.bold

    requests: List[Dict[str, Any]] = [
        _repeat_cell(
            region,
            {"backgroundColor": header.background.to_api(), "textFormat": text_format},
        )
    ]
    if header.border is not None:
        requests.append(_borders_request(region, header.border))

    for column_class, start, end in runs:
        requests.append(
            {
                "updateDimensionProperties": {
                    "range": {
                        "sheetId": region.table_id,
                        "dimension": "COLUMNS",
                        "startIndex": start,
                        "endIndex": end,
                    },
                    "properties": {"pixelSize": template.width_for(column_class)},
                    "fields": "pixelSize",
                }
            }
        )
    return requests


def _body_requests(
    region: CellRegion, template: StyleTemplate, runs: List[ColumnRun]
) -> List[Dict[str, Any]]:
    requests = []
    for column_class, start, end in runs:
        run_region = CellRegion(region.table_id, region.row_start, region.row_end, start, end)
        requests.append(_repeat_cell(run_region, _body_cell_format(template.body_for(column_class))))
    return requests


def _body_cell_format(body: BodyFormat) -> Dict[str, Any]:
    cell_format: Dict[str, Any] = {"wrapStrategy": body.wrap_strategy.api_value}
    if body.font is not None:
        text_format = body.font.to_api()
        if text_format:
            cell_format["textFormat"] = text_format
    return cell_format


def _repeat_cell(region: CellRegion, cell_format: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "repeatCell": {
            "range": region.to_grid_range(),
            "cell": {"userEnteredFormat": cell_format},
            "fields": f"userEnteredFormat({','.join(cell_format)})",
        }
    }


def _borders_request(region: CellRegion, border: BorderStyle) -> Dict[str, Any]:
    edge = border.to_api()
    return {
        "updateBorders": {
            "range": region.to_grid_range(),
            "top": edge,
            "bottom": edge,
            "left": edge,
            "right": edge,
            "innerVertical": edge,
            "innerHorizontal": edge,
        }
    }
