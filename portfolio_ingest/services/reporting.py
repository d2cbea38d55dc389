from html import escape
from typing import Iterable

from portfolio_ingest.core.timeutil import format_rfc850
from portfolio_ingest.schemas.reports import WalletReportRow

HEADER_ROW = "<tr><th>address</th><th>created_at</th></tr>"
ROW_TEMPLATE = "<tr><td>{address}</td><td>{created_at}</td></tr>"


def render_report_table(rows: Iterable[WalletReportRow]) -> str:
    """HTML table of wallets and their latest ingestion time; blank when never fetched."""
    parts = ["<table>", HEADER_ROW]
    for row in rows:
        created_at = format_rfc850(row.created_at) if row.created_at else ""
        parts.append(ROW_TEMPLATE.format(address=escape(row.address), created_at=created_at))
    parts.append("</table>")
    return "".join(parts)
