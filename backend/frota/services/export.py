"""Delimited-text and printable PDF exports of request snapshots."""
from __future__ import annotations

import csv
import io
from xml.sax.saxutils import escape
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from frota.models.requests import VehicleRequest


CSV_FILENAME = "base_dados_frota.csv"
CSV_HEADERS = [
    "ID",
    "Cliente",
    "Tipo",
    "De",
    "Para",
    "Data Início",
    "Data Fim",
    "Viatura",
    "Motorista",
    "Estado",
    "Operador",
]

BRAND_COLOR = colors.HexColor("#0ea5e9")


def _iso_minutes(value: datetime) -> str:
    return value.strftime("%Y-%m-%dT%H:%M")


def _display_datetime(value: datetime) -> str:
    return value.strftime("%d/%m/%Y %H:%M")


def csv_row(record: VehicleRequest) -> List[str]:
    return [
        record.id,
        record.client_name,
        record.request_type.label,
        record.pickup_location,
        record.dropoff_location,
        _iso_minutes(record.pickup_date),
        _iso_minutes(record.return_date),
        record.vehicle_group,
        record.assigned_driver or "",
        record.status.label,
        record.operator_name,
    ]


def to_delimited_text(records: Iterable[VehicleRequest]) -> str:
    """Header row plus one comma-separated row per record, in the given order."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(CSV_HEADERS)
    for record in records:
        writer.writerow(csv_row(record))
    return buffer.getvalue().rstrip("\n")


def document_filename(record: VehicleRequest) -> str:
    return f"Pedido_{record.id}.pdf"


def document_rows(record: VehicleRequest) -> List[Tuple[str, str]]:
    """Field/value pairs printed in the request summary table."""
    vehicle = record.vehicle_group
    if record.assigned_vehicle_plate:
        vehicle = f"{vehicle} ({record.assigned_vehicle_plate})"
    return [
        ("Cliente", record.client_name),
        ("Contacto", record.client_contact),
        ("Tipo", record.request_type.label),
        ("Levantamento", f"{record.pickup_location} em {_display_datetime(record.pickup_date)}"),
        ("Devolução", f"{record.dropoff_location} em {_display_datetime(record.return_date)}"),
        ("Viatura", vehicle),
        ("Motorista", record.assigned_driver or "N/A"),
        ("Estado", record.status.label),
        ("Notas", record.notes or "-"),
    ]


class RequestSummaryPDF:
    """Render a single request as a printable summary with signature lines."""

    def __init__(self, record: VehicleRequest, issued_on: Optional[date] = None):
        self.record = record
        self.issued_on = issued_on or date.today()
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        self.title_style = ParagraphStyle(
            "SummaryTitle",
            parent=self.styles["Heading1"],
            fontSize=22,
            textColor=BRAND_COLOR,
            spaceAfter=12,
            fontName="Helvetica-Bold",
        )
        self.meta_style = ParagraphStyle(
            "SummaryMeta",
            parent=self.styles["Normal"],
            fontSize=10,
            textColor=colors.HexColor("#64748b"),
            leading=14,
        )
        self.cell_style = ParagraphStyle(
            "SummaryCell",
            parent=self.styles["Normal"],
            fontSize=11,
            leading=14,
        )
        self.label_style = ParagraphStyle(
            "SummaryLabel",
            parent=self.cell_style,
            fontName="Helvetica-Bold",
        )

    @staticmethod
    def _markup(text: str) -> str:
        return escape(text).replace("\n", "<br/>")

    def _header(self) -> list:
        return [
            Paragraph("Resumo do Pedido", self.title_style),
            Paragraph(self._markup(f"ID: {self.record.id}"), self.meta_style),
            Paragraph(f"Data Emissão: {self.issued_on.strftime('%d/%m/%Y')}", self.meta_style),
            Paragraph(self._markup(f"Operador: {self.record.operator_name}"), self.meta_style),
        ]

    def _details(self) -> Table:
        rows = [["Campo", "Detalhe"]]
        for label, value in document_rows(self.record):
            rows.append([
                Paragraph(self._markup(label), self.label_style),
                Paragraph(self._markup(value), self.cell_style),
            ])
        # Long notes may need more than one page.
        return Table(
            rows,
            colWidths=[140, 340],
            hAlign="LEFT",
            repeatRows=1,
            splitInRow=1,
            style=TableStyle([
                ("BACKGROUND", (0, 0), (-1, 0), BRAND_COLOR),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, 0), 11),
                ("PADDING", (0, 0), (-1, -1), 4),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#cbd5e1")),
            ]),
        )

    @staticmethod
    def _signatures() -> Table:
        return Table(
            [["Assinatura Cliente", "", "Assinatura Empresa"]],
            colWidths=[200, 80, 200],
            hAlign="LEFT",
            style=TableStyle([
                ("LINEABOVE", (0, 0), (0, 0), 1, colors.black),
                ("LINEABOVE", (2, 0), (2, 0), 1, colors.black),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("TOPPADDING", (0, 0), (-1, -1), 4),
            ]),
        )

    def render(self) -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=50,
            leftMargin=50,
            topMargin=50,
            bottomMargin=50,
            title=f"Pedido {self.record.id}",
        )
        story = self._header()
        story.append(Spacer(1, 16))
        story.append(self._details())
        story.append(Spacer(1, 60))
        story.append(self._signatures())
        doc.build(story)
        return buffer.getvalue()


def to_printable_document(record: VehicleRequest, issued_on: Optional[date] = None) -> bytes:
    """PDF bytes for one request."""
    return RequestSummaryPDF(record, issued_on=issued_on).render()
