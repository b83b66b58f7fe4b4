import csv
from io import StringIO, BytesIO
from datetime import datetime
from ..models import User
from .currency import format_money

from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib import colors
from reportlab.lib.units import inch

def _status(value) -> str:
    return getattr(value, "value", value) or ""

def generate_payments_csv(rows: list[dict]) -> str:
    """Generates a CSV report from host payment rows."""
    output = StringIO()
    writer = csv.writer(output)

    # Header
    writer.writerow(["Payment ID", "Booking ID", "Hotel", "Date", "Amount", "Method", "Status", "Transaction ID"])

    # Data
    for r in rows:
        writer.writerow([
            r["payment_id"],
            r["booking_id"],
            r["hotel_name"],
            r["payment_date"].date().isoformat() if r.get("payment_date") else "",
            f"{r['amount']:.2f}" if r.get("amount") is not None else "0.00",
            r.get("payment_method") or "",
            _status(r.get("status")),
            r.get("transaction_id") or "",
        ])

    return output.getvalue()

def generate_payments_pdf(rows: list[dict], host: User, currency: str) -> bytes:
    """Generates a PDF financial report from host payment rows using ReportLab."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, rightMargin=0.5*inch, leftMargin=0.5*inch, topMargin=0.5*inch, bottomMargin=0.5*inch)
    styles = getSampleStyleSheet()
    elements = []

    # Title
    title = f"Payments Report for {host.full_name or host.email}"
    elements.append(Paragraph(title, styles['h1']))

    # Subtitle with generation date and total
    total = sum((r["amount"] for r in rows if r.get("amount") is not None), 0)
    subtitle = f"Generated {datetime.utcnow().date().isoformat()} - {len(rows)} payments, total {format_money(total, currency)}"
    elements.append(Paragraph(subtitle, styles['h2']))
    elements.append(Spacer(1, 0.25*inch))

    # Table Data
    data = [["Date", "Hotel", "Booking", "Amount", "Method", "Status"]]
    for r in rows:
        data.append([
            r["payment_date"].date().isoformat() if r.get("payment_date") else "-",
            r["hotel_name"],
            f"#{r['booking_id']}",
            format_money(r["amount"], currency),
            r.get("payment_method") or "-",
            _status(r.get("status")).title(),
        ])

    # Create Table
    table = Table(data, colWidths=[1*inch, 1.8*inch, 0.8*inch, 1.1*inch, 1.3*inch, 0.9*inch])
    style = TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.teal),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 12),
        ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
        ('GRID', (0,0), (-1,-1), 1, colors.black)
    ])
    table.setStyle(style)
    elements.append(table)

    doc.build(elements)
    return buffer.getvalue()
