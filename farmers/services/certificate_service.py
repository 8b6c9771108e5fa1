"""
Farmer Registration Certificates

Builds the A4 registration certificate PDF with reportlab and keeps the
matching Certificate record up to date.

Layout:
- Page 1: organization header, title, farmer name and NIN, personal /
  location / farm information tables, signature block, verification QR code
- One page per farm: specifications table and the farm boundary drawing
"""

import logging
from io import BytesIO

from django.conf import settings
from django.utils import timezone
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing, Polygon, Rect, String
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import (
    PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
)

from core.text_utils import format_full_name, format_location, to_title_case
from farms.services.area import calculate_polygon_hectares
from farms.services.geometry import normalize_farm_geometry

logger = logging.getLogger(__name__)

NAVY = colors.HexColor('#003366')
GREEN = colors.HexColor('#006633')
GREY = colors.HexColor('#505050')

POLYGON_DRAWING_WIDTH = 17 * cm
POLYGON_DRAWING_HEIGHT = 12 * cm


def certificate_id_for(farmer, year=None):
    """``CCSA-<year>-<last 6 characters of the farmer id, upper case>``"""
    prefix = getattr(settings, 'CERTIFICATE_PREFIX', 'CCSA')
    year = year or timezone.now().year
    return f"{prefix}-{year}-{str(farmer.pk)[-6:].upper()}"


def certificate_filename(farmer):
    prefix = getattr(settings, 'CERTIFICATE_PREFIX', 'CCSA')
    return f"{prefix}-Certificate-{farmer.first_name}-{farmer.last_name}.pdf"


def verification_url(certificate_id):
    base = getattr(settings, 'FRONTEND_URL', '').rstrip('/')
    return f"{base}/verify-certificate/{certificate_id}"


def issue_certificate(farmer):
    """
    Create or refresh the farmer's certificate for the current year.

    Regenerating re-activates the record and moves its issue date.
    """
    from farmers.models import Certificate

    certificate_id = certificate_id_for(farmer)
    certificate, created = Certificate.objects.update_or_create(
        certificate_id=certificate_id,
        defaults={
            'farmer': farmer,
            'issued_date': timezone.now(),
            'status': 'active',
            'qr_code': certificate_id,
        }
    )
    action = 'issued' if created else 're-issued'
    logger.info(f"Certificate {certificate_id} {action} for farmer {farmer.pk}")
    return certificate


def _value(text, default='N/A'):
    return text if text not in (None, '') else default


def farm_polygon_points(farm):
    """The farm boundary as [lng, lat] pairs, without the fallback square."""
    ring = normalize_farm_geometry(farm)
    if ring.used_fallback or not ring.is_valid:
        return []
    return ring.coordinates


def farm_area_hectares(farm):
    """Recorded farm size, or the polygon-derived area when none was recorded."""
    if farm.farm_size:
        return farm.farm_size
    points = farm_polygon_points(farm)
    return calculate_polygon_hectares(points) if points else 0


class CertificateGenerator:
    """
    Usage:
        pdf_bytes = CertificateGenerator().generate(farmer)
    """

    def __init__(self):
        self.organization = getattr(settings, 'CERTIFICATE_ORGANIZATION', '')
        self.institution = getattr(settings, 'CERTIFICATE_INSTITUTION', '')
        self.styles = self._build_styles()
        self._certificate_id = None

    def _build_styles(self):
        styles = getSampleStyleSheet()
        styles.add(ParagraphStyle(
            name='Organization',
            parent=styles['Heading1'],
            fontSize=20,
            alignment=TA_CENTER,
            textColor=GREEN,
            spaceAfter=4,
        ))
        styles.add(ParagraphStyle(
            name='Institution',
            parent=styles['Heading2'],
            fontSize=14,
            alignment=TA_CENTER,
            textColor=NAVY,
            spaceAfter=14,
        ))
        styles.add(ParagraphStyle(
            name='CertificateTitle',
            parent=styles['Title'],
            fontName='Times-Bold',
            fontSize=24,
            textColor=NAVY,
            spaceAfter=6,
        ))
        styles.add(ParagraphStyle(
            name='Centered',
            parent=styles['Normal'],
            alignment=TA_CENTER,
            textColor=GREY,
        ))
        styles.add(ParagraphStyle(
            name='FarmerName',
            parent=styles['Heading1'],
            fontSize=24,
            alignment=TA_CENTER,
            textColor=NAVY,
            spaceBefore=10,
            spaceAfter=6,
        ))
        styles.add(ParagraphStyle(
            name='Body',
            parent=styles['Normal'],
            fontName='Times-Roman',
            fontSize=11,
            leading=15,
            alignment=TA_CENTER,
            spaceBefore=10,
            spaceAfter=16,
        ))
        return styles

    # =========================================================================
    # PAGE DECORATION
    # =========================================================================

    def _decorate_page(self, canvas, doc):
        width, height = A4
        canvas.saveState()
        canvas.setStrokeColor(NAVY)
        canvas.setLineWidth(2)
        canvas.rect(0.5 * cm, 0.5 * cm, width - 1 * cm, height - 1 * cm)
        canvas.setStrokeColor(GREEN)
        canvas.setLineWidth(1)
        canvas.rect(0.7 * cm, 0.7 * cm, width - 1.4 * cm, height - 1.4 * cm)

        canvas.setFont('Helvetica', 7)
        canvas.setFillColor(colors.grey)
        canvas.drawCentredString(
            width / 2, 1 * cm,
            f"Certificate ID: {self._certificate_id} | "
            f"Generated on {timezone.localdate().isoformat()} | Page {doc.page}"
        )
        canvas.restoreState()

    # =========================================================================
    # SECTIONS
    # =========================================================================

    def _info_table(self, title, rows):
        data = [[title, '']] + [[label, _value(value)] for label, value in rows]
        table = Table(data, colWidths=[2.6 * cm, 3 * cm])
        table.setStyle(TableStyle([
            ('SPAN', (0, 0), (-1, 0)),
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#F5F5F5')),
            ('TEXTCOLOR', (0, 0), (-1, 0), NAVY),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('FONTNAME', (1, 1), (1, -1), 'Helvetica-Bold'),
            ('TEXTCOLOR', (0, 1), (0, -1), colors.grey),
            ('ALIGN', (1, 1), (1, -1), 'RIGHT'),
            ('BOX', (0, 0), (-1, -1), 0.5, colors.HexColor('#DCDCDC')),
            ('LINEBELOW', (0, 0), (-1, 0), 0.5, colors.HexColor('#DCDCDC')),
        ]))
        return table

    def _details_tables(self, farmer, farms):
        first_farm = farms[0] if farms else None
        personal = self._info_table('Personal Information', [
            ('Phone:', str(farmer.phone) if farmer.phone else None),
            ('Gender:', to_title_case(farmer.gender)),
            ('Status:', farmer.get_status_display()),
            ('Reg. Date:', timezone.localtime(farmer.created_at).strftime('%d/%m/%Y')),
        ])
        location = self._info_table('Location Details', [
            ('State:', format_location(farmer.state)),
            ('LGA:', format_location(farmer.lga)),
            ('Ward:', format_location(farmer.ward)),
            ('Polling Unit:', (farmer.polling_unit or '')[:14]),
        ])
        farm_info = self._info_table('Farm Information', [
            ('Farm Size:', f"{farm_area_hectares(first_farm)} ha" if first_farm else None),
            ('Primary Crop:', to_title_case(first_farm.primary_crop) if first_farm else None),
            ('Soil Type:', to_title_case(first_farm.soil_type) if first_farm else None),
            ('No. of Farms:', str(len(farms))),
        ])
        wrapper = Table([[personal, location, farm_info]], colWidths=[5.9 * cm] * 3)
        wrapper.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')]))
        return wrapper

    def _signatures(self, cluster):
        lead = cluster.cluster_lead_name.upper() if cluster else 'UNKNOWN'
        data = [
            ['_____________________', '_____________________', '_____________________'],
            [lead, '', 'CHIEF EXECUTIVE OFFICER'],
            ['Cluster Lead', 'District Head', self.organization],
        ]
        table = Table(data, colWidths=[5.9 * cm] * 3)
        table.setStyle(TableStyle([
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('FONTNAME', (0, 1), (-1, 1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('TEXTCOLOR', (0, 2), (-1, 2), colors.grey),
            ('LINEABOVE', (0, 0), (-1, 0), 0.5, NAVY),
            ('TOPPADDING', (0, 0), (-1, 0), 24),
        ]))
        return table

    def _qr_code(self):
        size = 2.5 * cm
        widget = QrCodeWidget(verification_url(self._certificate_id))
        x1, y1, x2, y2 = widget.getBounds()
        drawing = Drawing(size, size, transform=[size / (x2 - x1), 0, 0, size / (y2 - y1), 0, 0])
        drawing.add(widget)
        return drawing

    def _polygon_drawing(self, farm):
        """The farm boundary scaled into a framed drawing."""
        drawing = Drawing(POLYGON_DRAWING_WIDTH, POLYGON_DRAWING_HEIGHT)
        drawing.add(Rect(
            0, 0, POLYGON_DRAWING_WIDTH, POLYGON_DRAWING_HEIGHT,
            strokeColor=colors.HexColor('#C8C8C8'), fillColor=None
        ))

        points = farm_polygon_points(farm)
        if not points:
            drawing.add(String(
                POLYGON_DRAWING_WIDTH / 2, POLYGON_DRAWING_HEIGHT / 2,
                'No boundary captured for this farm',
                textAnchor='middle', fontName='Helvetica-Oblique', fontSize=10,
                fillColor=colors.grey
            ))
            return drawing

        lngs = [lng for lng, _ in points]
        lats = [lat for _, lat in points]
        min_lng, max_lng = min(lngs), max(lngs)
        min_lat, max_lat = min(lats), max(lats)
        padding = 1 * cm
        span = max(max_lng - min_lng, max_lat - min_lat) or 1
        scale = min(POLYGON_DRAWING_WIDTH, POLYGON_DRAWING_HEIGHT) - 2 * padding

        flat = []
        for lng, lat in points:
            flat.append(padding + (lng - min_lng) / span * scale)
            flat.append(padding + (lat - min_lat) / span * scale)

        drawing.add(Polygon(
            flat,
            strokeColor=GREEN,
            strokeWidth=1.5,
            fillColor=colors.Color(0, 0.4, 0.2, alpha=0.2)
        ))
        return drawing

    def _farm_page(self, farm):
        styles = self.styles
        secondary = ', '.join(str(crop) for crop in (farm.secondary_crop or [])) or 'None'
        location = ', '.join(
            part for part in (format_location(farm.farm_state), format_location(farm.farm_local_government)) if part
        )
        rows = [
            ['Farm Size:', f"{farm_area_hectares(farm)} hectares"],
            ['Primary Crop:', to_title_case(farm.primary_crop) or 'Not specified'],
            ['Secondary Crop:', secondary],
            ['Location:', location or 'Not specified'],
            ['Soil Type:', to_title_case(farm.soil_type) or 'Not specified'],
            ['Experience:', f"{farm.farming_experience or 0} years"],
        ]
        table = Table(rows, colWidths=[4 * cm, 12 * cm])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 11),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ]))

        return [
            PageBreak(),
            Paragraph('FARM DETAILS &amp; MAPPING', styles['CertificateTitle']),
            Paragraph(f"Farm ID: {str(farm.pk)[-8:].upper()}", styles['Centered']),
            Spacer(1, 20),
            Paragraph('FARM SPECIFICATIONS', styles['Heading2']),
            table,
            Spacer(1, 20),
            self._polygon_drawing(farm),
        ]

    # =========================================================================
    # BUILD
    # =========================================================================

    def generate(self, farmer):
        """
        Render the certificate for ``farmer`` (with farms and cluster).

        Returns:
            bytes: the PDF document
        """
        styles = self.styles
        farms = list(farmer.farms.all())
        self._certificate_id = certificate_id_for(farmer)
        name = format_full_name(farmer.first_name, farmer.middle_name, farmer.last_name).upper()
        year = timezone.now().year

        header = Table(
            [[Paragraph(self.organization, styles['Organization']), self._qr_code()]],
            colWidths=[14.5 * cm, 3 * cm]
        )
        header.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'MIDDLE')]))

        elements = [
            header,
            Paragraph(self.institution, styles['Institution']),
            Spacer(1, 16),
            Paragraph('FARMER REGISTRATION CERTIFICATE', styles['CertificateTitle']),
            Paragraph(f"{self.organization} (CCSA)", styles['Centered']),
            Spacer(1, 20),
            Paragraph('<i>This is to certify that</i>', styles['Centered']),
            Paragraph(name, styles['FarmerName']),
            Paragraph(f"NIN: {farmer.nin or 'xxxxxxxx'}", styles['Centered']),
            Paragraph(
                f"is a duly registered farmer with {self.organization} (CCSA), {self.institution}, "
                f"and is hereby authorized to participate in CCSA agricultural programs, "
                f"initiatives, and benefits for the {year} farming season.",
                styles['Body']
            ),
            self._details_tables(farmer, farms),
            Spacer(1, 30),
            self._signatures(farmer.cluster),
        ]

        for farm in farms:
            elements.extend(self._farm_page(farm))

        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=1.5 * cm,
            leftMargin=1.5 * cm,
            topMargin=1.5 * cm,
            bottomMargin=1.5 * cm,
            title='CCSA Farmer Certificate',
            author=self.organization,
        )
        doc.build(elements, onFirstPage=self._decorate_page, onLaterPages=self._decorate_page)

        logger.info(f"Certificate PDF generated for farmer {farmer.pk} ({len(farms)} farm pages)")
        return buffer.getvalue()
