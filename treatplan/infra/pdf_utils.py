import io
from reportlab.lib.pagesizes import A4, landscape
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet

from treatplan.logic.reporting.summary import display_area_for_item, treatment_display_name


def generate_pdf_for_plan(patient_name, sections):
    """Generate a PDF table: Section / Treatment / Area / Product / Qty for categorized plan sections."""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=landscape(A4),
        rightMargin=20, leftMargin=20, topMargin=20, bottomMargin=20
    )

    styles = getSampleStyleSheet()
    elements = [
        Paragraph(f"Treatment Plan – {patient_name or 'Patient'}", styles["Title"]),
        Spacer(1, 16),
    ]

    data = [["Section", "Treatment", "Area", "Product", "Qty"]]
    for section, items in sections:
        for item in items:
            data.append([
                section,
                treatment_display_name(item),
                display_area_for_item(item) or "-",
                item.product or "-",
                item.quantity or "-",
            ])
    if len(data) == 1:
        data.append(["-", "No treatments discussed yet", "-", "-", "-"])

    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0,0), (-1,0), colors.HexColor("#8E6C88")),
        ("TEXTCOLOR", (0,0), (-1,0), colors.whitesmoke),
        ("ALIGN", (0,0), (-1,-1), "LEFT"),
        ("FONTNAME", (0,0), (-1,0), "Helvetica-Bold"),
        ("FONTSIZE", (0,0), (-1,0), 12),
        ("BOTTOMPADDING", (0,0), (-1,0), 10),
        ("GRID", (0,0), (-1,-1), 0.5, colors.grey),
    ]))

    elements.append(table)
    doc.build(elements)
    return buf.getvalue()
