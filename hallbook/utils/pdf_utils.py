"""
PDF generation utilities for hall and booking reports.
"""

import io
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle


class PDFGenerator:
    """Builds simple tabular reports in memory"""

    def __init__(self, page_size=A4, margins=None):
        self.page_size = page_size
        self.margins = margins or {'top': 2*cm, 'bottom': 2*cm, 'left': 1.5*cm, 'right': 1.5*cm}
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        self.styles.add(ParagraphStyle(
            name='ReportTitle',
            parent=self.styles['Heading1'],
            fontSize=20,
            textColor=colors.darkblue,
            spaceAfter=18,
            alignment=TA_CENTER
        ))
        self.styles.add(ParagraphStyle(
            name='ReportHeading',
            parent=self.styles['Heading2'],
            fontSize=13,
            textColor=colors.darkblue,
            spaceBefore=14,
            spaceAfter=8
        ))
        self.styles.add(ParagraphStyle(
            name='ReportBody',
            parent=self.styles['Normal'],
            fontSize=10,
            spaceAfter=6,
            alignment=TA_JUSTIFY
        ))
        self.styles.add(ParagraphStyle(
            name='TableCell',
            parent=self.styles['Normal'],
            fontSize=8,
            leading=10,
        ))

    def generate_report(
        self,
        title: str,
        content: List[Dict[str, Any]],
        header_info: Optional[Dict[str, str]] = None,
    ) -> bytes:
        """
        Render a report and return the PDF bytes.

        `content` items are dicts with a `type` of heading, paragraph, table
        or spacer.
        """
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=self.page_size,
            topMargin=self.margins['top'],
            bottomMargin=self.margins['bottom'],
            leftMargin=self.margins['left'],
            rightMargin=self.margins['right'],
            title=title,
        )
        story = [Paragraph(escape(title), self.styles['ReportTitle'])]

        if header_info:
            for key, value in header_info.items():
                story.append(Paragraph(f"<b>{escape(key)}:</b> {escape(str(value))}", self.styles['ReportBody']))
            story.append(Spacer(1, 12))

        for item in content:
            kind = item.get('type')
            if kind == 'heading':
                story.append(Paragraph(escape(item['text']), self.styles['ReportHeading']))
            elif kind == 'paragraph':
                text = escape(item['text'] or "").replace("\n", "<br/>")
                story.append(Paragraph(text, self.styles['ReportBody']))
            elif kind == 'table':
                story.append(self._create_table(item['data'], item.get('headers'), item.get('col_widths')))
            elif kind == 'spacer':
                story.append(Spacer(1, item.get('height', 12)))

        doc.build(story)
        return buffer.getvalue()

    def _create_table(
        self,
        data: List[List[Any]],
        headers: Optional[List[str]] = None,
        col_widths: Optional[List[float]] = None,
    ) -> Table:
        cell = self.styles['TableCell']
        rows = [[Paragraph(escape(str(value)), cell) for value in row] for row in data]
        if headers:
            rows.insert(0, [Paragraph(f"<b>{escape(h)}</b>", cell) for h in headers])
        if not rows:
            rows = [[Paragraph("No data available", cell)]]

        table = Table(rows, colWidths=col_widths, repeatRows=1 if headers else 0)
        style = [
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.whitesmoke]),
        ]
        if headers:
            style.append(('BACKGROUND', (0, 0), (-1, 0), colors.lightsteelblue))
        table.setStyle(TableStyle(style))
        return table
