"""
Primitive PDF renderer (tier 3).

Draws the DocumentModel straight onto reportlab canvases: no HTML, no
browser, no network. This is the backstop of the render chain, so it only
depends on the Python process itself.
"""

import asyncio
from io import BytesIO
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import (
    BaseDocTemplate,
    Frame,
    PageBreak,
    PageTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
)
from reportlab.platypus.doctemplate import LayoutError

from riskify.core.exceptions import RendererUnavailable
from riskify.documents.model import DocumentModel
from riskify.rendering.base import BaseRenderer, RenderLoggerProtocol
from riskify.rendering.html import SIGN_IN_REGISTER_ROWS
from riskify.risk import RiskLevel, RiskScore

PAGE_WIDTH, PAGE_HEIGHT = A4
PADDING = 14 * mm
HEADER_HEIGHT = 18 * mm
FOOTER_HEIGHT = 10 * mm

BRAND_NAVY = colors.HexColor("#1e3a8a")
HEADER_FILL = colors.HexColor("#f1f5f9")
GRID = colors.HexColor("#cbd5e1")

LEVEL_COLORS = {
    RiskLevel.LOW: colors.HexColor("#22c55e"),
    RiskLevel.MEDIUM: colors.HexColor("#f59e0b"),
    RiskLevel.HIGH: colors.HexColor("#ef4444"),
    RiskLevel.EXTREME: colors.HexColor("#7c2d12"),
}

LEGEND = [
    ("1-4 Low", RiskLevel.LOW, "Continue with existing controls"),
    ("5-9 Medium", RiskLevel.MEDIUM, "Additional controls may be required"),
    ("10-16 High", RiskLevel.HIGH, "Additional controls required"),
    ("17+ Extreme", RiskLevel.EXTREME, "Work must not proceed without elimination or substitution"),
]


def _p(text: str, style: ParagraphStyle) -> Paragraph:
    return Paragraph(escape(text).replace("\n", "<br/>"), style)


def _cell(text: str, style: ParagraphStyle) -> list[Paragraph]:
    """One paragraph per line; a list cell lets a tall row split across pages."""
    lines = [line for line in text.splitlines() if line.strip()]
    return [Paragraph(escape(line), style) for line in lines or ["-"]]


def _bullets(items, style: ParagraphStyle) -> list[Paragraph]:
    if not items:
        return [_p("-", style)]
    return [Paragraph(f"&bull; {escape(item)}", style) for item in items]


class PrimitiveRenderer(BaseRenderer):
    """Renderer that draws text and shapes with reportlab."""

    NAME = "primitive"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        timeout: Optional[float] = None,
        logger: Optional[RenderLoggerProtocol] = None,
    ) -> None:
        super().__init__(timeout=timeout, logger=logger)
        styles = getSampleStyleSheet()
        self._heading = ParagraphStyle(
            "SwmsHeading",
            parent=styles["Heading2"],
            fontSize=12,
            textColor=BRAND_NAVY,
            spaceBefore=10,
            spaceAfter=6,
        )
        self._body = ParagraphStyle("SwmsBody", parent=styles["BodyText"], fontSize=8, leading=10)
        self._bold = ParagraphStyle("SwmsBold", parent=self._body, fontName="Helvetica-Bold")

    async def render(self, document: DocumentModel) -> bytes:
        # reportlab is synchronous; keep the event loop free
        try:
            payload = await asyncio.to_thread(self.build_pdf, document)
        except LayoutError as e:
            raise RendererUnavailable(self.NAME, "layout failed", original_error=e) from e
        except (ValueError, KeyError, AttributeError) as e:
            raise RendererUnavailable(self.NAME, "drawing failed", original_error=e) from e
        return self._ensure_pdf(payload)

    def build_pdf(self, document: DocumentModel) -> bytes:
        """Synchronously draw the whole document and return the PDF bytes."""
        buffer = BytesIO()
        doc = BaseDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=0,
            rightMargin=0,
            topMargin=0,
            bottomMargin=0,
            title=f"SWMS - {document.project.project_name}",
            author=document.project.company_name,
        )
        frame = Frame(
            0,
            0,
            PAGE_WIDTH,
            PAGE_HEIGHT,
            leftPadding=PADDING,
            rightPadding=PADDING,
            topPadding=PADDING + HEADER_HEIGHT,
            bottomPadding=PADDING + FOOTER_HEIGHT,
            id="content",
        )
        doc.addPageTemplates([
            PageTemplate(
                id="swms",
                frames=[frame],
                onPage=lambda canv, d: self._draw_page_chrome(canv, document),
            )
        ])

        story = []
        story += self._project_section(document)
        story += self._authorisation_section(document)
        story += self._hrcw_section(document)
        story += self._activities_section(document)
        story += self._legend_section()
        story += self._ppe_section(document)
        story += self._equipment_section(document)
        story += self._emergency_section(document)
        story += self._sign_in_section(document)

        doc.build(story)
        self._log_debug(f"{doc.page} page(s) drawn")
        return buffer.getvalue()

    # -------------------------------------------------------------------------
    # Page chrome
    # -------------------------------------------------------------------------

    def _draw_page_chrome(self, canv: canvas.Canvas, document: DocumentModel) -> None:
        canv.saveState()

        # Watermark
        canv.setFillColorRGB(0.12, 0.23, 0.54, alpha=0.05)
        canv.setFont("Helvetica-Bold", 96)
        canv.translate(PAGE_WIDTH / 2, PAGE_HEIGHT / 2)
        canv.rotate(30)
        canv.drawCentredString(0, 0, "RISKIFY")
        canv.restoreState()

        canv.saveState()
        top = PAGE_HEIGHT - PADDING
        canv.setFillColor(BRAND_NAVY)
        canv.roundRect(PADDING, top - HEADER_HEIGHT, PAGE_WIDTH - 2 * PADDING, HEADER_HEIGHT - 2 * mm, 4, fill=1, stroke=0)
        canv.setFillColor(colors.white)
        canv.setFont("Helvetica-Bold", 14)
        canv.drawString(PADDING + 5 * mm, top - 8 * mm, "SAFE WORK METHOD STATEMENT")
        canv.setFont("Helvetica", 8)
        canv.drawString(
            PADDING + 5 * mm,
            top - 13 * mm,
            f"{document.project.project_name}  |  {document.project.project_address}",
        )

        canv.setStrokeColor(GRID)
        canv.line(PADDING, PADDING + FOOTER_HEIGHT - 3 * mm, PAGE_WIDTH - PADDING, PADDING + FOOTER_HEIGHT - 3 * mm)
        canv.setFillColor(colors.HexColor("#64748b"))
        canv.setFont("Helvetica", 7)
        canv.drawString(
            PADDING,
            PADDING + 2 * mm,
            f"Generated by Riskify SWMS Builder | {document.document_id} | "
            f"{document.prepared_on.strftime('%d/%m/%Y')}",
        )
        canv.drawRightString(PAGE_WIDTH - PADDING, PADDING + 2 * mm, f"Page {canv.getPageNumber()}")
        canv.restoreState()

    # -------------------------------------------------------------------------
    # Sections
    # -------------------------------------------------------------------------

    def _table(self, rows, col_widths, header: bool = True, extra_styles=None, row_heights=None) -> Table:
        table = Table(
            rows,
            colWidths=col_widths,
            rowHeights=row_heights,
            repeatRows=1 if header else 0,
            splitInRow=1,
        )
        style = [
            ("GRID", (0, 0), (-1, -1), 0.5, GRID),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
        ]
        if header:
            style += [
                ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ]
        table.setStyle(TableStyle(style + list(extra_styles or [])))
        return table

    def _kv_table(self, pairs) -> Table:
        width = PAGE_WIDTH - 2 * PADDING
        rows = [[[_p(key, self._bold)], _cell(value, self._body)] for key, value in pairs]
        return self._table(
            rows,
            [width * 0.32, width * 0.68],
            header=False,
            extra_styles=[("BACKGROUND", (0, 0), (0, -1), colors.HexColor("#f8fafc"))],
        )

    def _score_cell(self, score: RiskScore) -> list[Paragraph]:
        return _cell(f"{score.value} {score.level.value}", self._bold)

    def _project_section(self, document: DocumentModel) -> list:
        project = document.project
        return [
            Paragraph("Project Information", self._heading),
            self._kv_table([
                ("Company", project.company_name),
                ("Project", project.project_name),
                ("Job Number", project.job_number),
                ("Project Address", project.project_address),
                ("Principal Contractor", project.principal_contractor),
                ("Project Manager", project.project_manager),
                ("Site Supervisor", project.site_supervisor),
                ("SWMS Prepared By", f"{project.swms_creator_name} ({project.swms_creator_position})"),
                ("Start Date / Duration", f"{project.start_date} / {project.duration}"),
                ("Trade", project.trade_type),
                ("Scope of Work", project.work_description),
            ]),
        ]

    def _hrcw_section(self, document: DocumentModel) -> list:
        if not document.hrcw_categories:
            return []
        return [
            Paragraph("High Risk Construction Work", self._heading),
            *_bullets(document.hrcw_categories, self._body),
        ]

    def _activities_section(self, document: DocumentModel) -> list:
        width = PAGE_WIDTH - 2 * PADDING
        ratios = [0.04, 0.2, 0.22, 0.08, 0.24, 0.08, 0.14]
        rows = [["#", "Activity", "Hazards", "Initial", "Control Measures", "Residual", "Legislation"]]
        cell_styles = []

        for index, activity in enumerate(document.activities, start=1):
            hazards = [
                f"[{h.category.value}] {h.description} ({h.initial_risk.value} {h.initial_risk.level.value})"
                for h in activity.hazards
            ]
            rows.append([
                str(index),
                _cell(f"{activity.name}\n{activity.description}\n{activity.trade}", self._body),
                _bullets(hazards, self._body),
                self._score_cell(activity.initial_risk),
                _bullets(activity.control_measures, self._body),
                self._score_cell(activity.residual_risk),
                _bullets(activity.legislation, self._body),
            ])
            cell_styles += [
                ("BACKGROUND", (3, index), (3, index), LEVEL_COLORS[activity.initial_risk.level]),
                ("BACKGROUND", (5, index), (5, index), LEVEL_COLORS[activity.residual_risk.level]),
            ]

        if not document.activities:
            rows.append(["", [_p("No work activities recorded.", self._body)], "", "", "", "", ""])

        return [
            Paragraph("Work Activities &amp; Risk Assessment", self._heading),
            self._table(rows, [width * r for r in ratios], extra_styles=cell_styles),
        ]

    def _legend_section(self) -> list:
        width = PAGE_WIDTH - 2 * PADDING
        rows = [[[_p(label, self._bold)], [_p(action, self._body)]] for label, _, action in LEGEND]
        styles = [
            ("BACKGROUND", (0, i), (0, i), LEVEL_COLORS[level])
            for i, (_, level, _) in enumerate(LEGEND)
        ]
        return [
            Paragraph("Risk Legend", self._heading),
            self._table(rows, [width * 0.25, width * 0.75], header=False, extra_styles=styles),
        ]

    def _ppe_section(self, document: DocumentModel) -> list:
        width = PAGE_WIDTH - 2 * PADDING
        rows = [["PPE", "Purpose"]]
        rows += [[[_p(item.name, self._bold)], _cell(item.description, self._body)] for item in document.ppe_items]
        if len(rows) == 1:
            rows.append([[_p("No PPE selected.", self._body)], ""])
        return [
            Paragraph("Personal Protective Equipment", self._heading),
            self._table(rows, [width * 0.4, width * 0.6]),
        ]

    def _equipment_section(self, document: DocumentModel) -> list:
        width = PAGE_WIDTH - 2 * PADDING
        ratios = [0.22, 0.14, 0.14, 0.14, 0.1, 0.13, 0.13]
        rows = [["Equipment", "Model", "Serial", "Category", "Risk", "Next Inspection", "Certification"]]
        cell_styles = []
        for index, item in enumerate(document.equipment, start=1):
            rows.append([
                _cell(item.name, self._body),
                _cell(item.model, self._body),
                _cell(item.serial_number, self._body),
                _cell(item.category, self._body),
                [_p(item.risk_level.value, self._bold)],
                item.next_inspection_label,
                "Required" if item.certification_required else "Not Required",
            ])
            cell_styles.append(("BACKGROUND", (4, index), (4, index), LEVEL_COLORS[item.risk_level]))
        if not document.equipment:
            rows.append([[_p("No plant or equipment recorded.", self._body)], "", "", "", "", "", ""])
        return [
            Paragraph("Plant &amp; Equipment", self._heading),
            self._table(rows, [width * r for r in ratios], extra_styles=cell_styles),
        ]

    def _emergency_section(self, document: DocumentModel) -> list:
        emergency = document.emergency
        pairs = [(contact.name, contact.phone) for contact in emergency.contacts]
        pairs += [
            ("Assembly Point", emergency.assembly_point),
            ("Nearest Hospital", emergency.nearest_hospital),
            ("Hospital Phone", emergency.hospital_phone),
            ("Emergency Procedures", emergency.procedures),
            ("Monitoring & Review", emergency.monitoring),
        ]
        return [
            Spacer(1, 4 * mm),
            Paragraph("Emergency Information", self._heading),
            self._kv_table(pairs),
        ]

    def _authorisation_section(self, document: DocumentModel) -> list:
        project = document.project
        return [
            Paragraph("Person Authorising SWMS", self._heading),
            self._kv_table([
                ("Name", project.authorising_person),
                ("Position", project.authorising_position),
                ("Signature", project.authorising_signature),
            ]),
        ]

    def _sign_in_section(self, document: DocumentModel) -> list:
        """Register on its own page, padded with blank rows for site use."""
        width = PAGE_WIDTH - 2 * PADDING
        ratios = [0.16, 0.15, 0.13, 0.1, 0.08, 0.08, 0.08, 0.22]
        rows = [["Name", "Company", "Position", "Date", "Time In", "Time Out", "Inducted", "Signature"]]
        for entry in document.sign_in_entries:
            rows.append([
                _cell(entry.name, self._body),
                _cell(entry.company, self._body),
                _cell(entry.position, self._body),
                entry.entry_date,
                entry.time_in,
                entry.time_out,
                "Yes" if entry.induction_complete else "No",
                _cell(entry.signature, self._body),
            ])
        blank = max(0, SIGN_IN_REGISTER_ROWS - len(document.sign_in_entries))
        rows += [[""] * len(ratios) for _ in range(blank)]
        row_heights = [None] * (len(rows) - blank) + [8 * mm] * blank
        return [
            PageBreak(),
            Paragraph("Site Personnel Sign In Register", self._heading),
            self._table(rows, [width * r for r in ratios], row_heights=row_heights),
            Spacer(1, 4 * mm),
            _p(
                "Note: All personnel must sign in upon arrival and sign out upon departure. "
                "Site induction must be completed before entry.",
                self._body,
            ),
        ]
