from datetime import date, datetime
import io
from typing import Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill
from openpyxl.worksheet.table import Table, TableStyleInfo

from stoper.schemas import WithdrawalRead

HEADERS = [
    "Data",
    "Ferramenta",
    "Quantidade",
    "TAG Perfuratriz",
    "Turma",
    "Supervisor",
    "Operador Responsável",
    "Motivo",
]

BOM = "\ufeff"


def format_local_datetime(dt: datetime) -> str:
    # pt-BR locale string: 19/10/2026, 14:38:00
    return dt.strftime("%d/%m/%Y, %H:%M:%S")


def _quote(value: str) -> str:
    return '"' + (value or "").replace('"', '""') + '"'


def export_to_csv(withdrawals: Sequence[WithdrawalRead]) -> bytes | None:
    """Semicolon CSV with a UTF-8 BOM; None when there is nothing to export."""
    if not withdrawals:
        return None

    lines = [";".join(HEADERS)]
    for w in withdrawals:
        lines.append(";".join([
            format_local_datetime(w.date),
            w.tool_name,
            str(w.quantity),
            w.rig_tag,
            w.team,
            w.supervisor,
            w.operator,
            _quote(w.reason),
        ]))

    return (BOM + "\n".join(lines)).encode("utf-8")


def export_to_xlsx(withdrawals: Sequence[WithdrawalRead]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Histórico"

    header_font = Font(bold=True)
    header_fill = PatternFill("solid", fgColor="DDDDDD")
    header_align = Alignment(horizontal="center", vertical="center")

    ws.append(HEADERS)
    ws.row_dimensions[1].height = 26
    for col in range(1, len(HEADERS) + 1):
        cell = ws.cell(row=1, column=col)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_align

    for w in withdrawals:
        ws.append([
            w.date,
            w.tool_name,
            w.quantity,
            w.rig_tag,
            w.team,
            w.supervisor,
            w.operator,
            w.reason,
        ])

    data_end_row = 1 + len(withdrawals)
    ws.freeze_panes = "A2"

    for r in range(2, data_end_row + 1):
        ws.cell(row=r, column=1).number_format = "dd/mm/yyyy hh:mm:ss"
        ws.cell(row=r, column=3).number_format = "0"

    col_widths = {"A": 20, "B": 18, "C": 11, "D": 15, "E": 10, "F": 14, "G": 22, "H": 22}
    for k, width in col_widths.items():
        ws.column_dimensions[k].width = width

    # a table needs at least one data row
    if withdrawals:
        table = Table(displayName="HistoricoStoper", ref=f"A1:H{data_end_row}")
        table.tableStyleInfo = TableStyleInfo(
            name="TableStyleMedium9",
            showFirstColumn=False,
            showLastColumn=False,
            showRowStripes=True,
            showColumnStripes=False,
        )
        ws.add_table(table)

    ws.append([])
    ws.append(["Exportado em", datetime.now().strftime("%d/%m/%Y %H:%M:%S")])

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def export_filename(ext: str, today: date | None = None) -> str:
    return f"historico_stoper_{(today or date.today()).isoformat()}.{ext}"
