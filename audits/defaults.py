"""
Seed data for the cold chain compliance self-audit.

Sections and items are listed in display order; order_index values are
assigned from that order (0-based within each parent).
"""

DEFAULT_TEMPLATE_NAME = "Cold Chain Compliance Self-Audit"
DEFAULT_TEMPLATE_DESCRIPTION = (
    "Annual vaccine and medicine storage self-audit covering equipment, "
    "monitoring, documentation, breach management, staff training and review."
)
DEFAULT_TEMPLATE_VERSION = "1.0"

BLOOD_PRODUCTS_NOTE = "Only applicable if handling blood products"

# (title, description, [(text, is_required, note)])
_SECTIONS = [
    ("1. Equipment & Certification",
     "Verify equipment specifications and compliance certifications", [
         ("Purpose-built refrigerator(s) in use (not domestic).", True, None),
         ("Current Cold Chain Certificate (valid ≤ 2 years from issue).", True, None),
         ("Refrigerator is QCPP-compliant and/or ARTG-listed.", True, None),
         ("Evidence of annual thermometer calibration (certificate available).", True, None),
         ("Back-up power arrangements documented.", True, None),
     ]),
    ("2. Temperature Monitoring",
     "Assess temperature monitoring practices and compliance", [
         ("Fridge(s) consistently maintaining +2 °C to +8 °C (optimal +5 °C).", True, None),
         ("Twice-daily monitoring completed (current, min, max recorded).", True, None),
         ("Reset function used after each min/max recording.", True, None),
         ("Logs clearly show time, date, and staff initials.", True, None),
         ("Excursion alerts are clearly visible and acted upon.", True, None),
     ]),
    ("3. Recording & Documentation",
     "Review documentation and record-keeping practices", [
         ("Paper or digital logs are up-to-date and legible.", True, None),
         ("Logs stored for ≥ 3 years (QCPP requirement).", True, None),
         ("Calibration certificates filed and accessible.", True, None),
         ("Vaccine/medicine management protocols documented and accessible to staff.", True, None),
         ("Records include batch numbers, delivery dates, and expiry dates.", True, None),
     ]),
    ("4. Cold Chain Breach Management",
     "Evaluate cold chain breach protocols and training", [
         ("Staff trained in cold chain breach protocol.", True, None),
         ("Protocol followed:", True, None),
         ('Isolate vaccines/medicines, label "Do Not Use".', True, None),
         ("Contact state/territory health department (vaccines).", True, None),
         ("Record incident details, corrective action, and outcome.", True, None),
         ("No vaccines/medicines discarded without official advice.", True, None),
         ("Evidence of corrective actions filed with logs.", True, None),
     ]),
    ("5. Broader Cold Chain (Non-Vaccine Medicines)",
     "Assess storage requirements for various medicines and biologics", [
         ("Insulins stored at 2–8 °C (room-temp storage tracked once opened).", True, None),
         ("Biologics (mAbs, growth hormones, etc.) stored at 2–8 °C per PI.", True, None),
         ("Eye drops/antibiotics/probiotics requiring refrigeration identified and stored correctly.", True, None),
         ("Blood & blood products stored per standards:", False, BLOOD_PRODUCTS_NOTE),
         ("Red cells: 2–6 °C", False, BLOOD_PRODUCTS_NOTE),
         ("Platelets: 20–24 °C with agitation", False, BLOOD_PRODUCTS_NOTE),
         ("Plasma: ≤ −25 °C", False, BLOOD_PRODUCTS_NOTE),
         ("Staff aware of individual product requirements (per manufacturer PI).", True, None),
     ]),
    ("6. Staff & Training",
     "Review staff training and coordination arrangements", [
         ("Vaccine/medicine coordinator appointed.", True, None),
         ("Back-up coordinator nominated.", True, None),
         ("All staff trained in Strive for 5 and QCPP protocols.", True, None),
         ("Staff know who to contact in event of breach.", True, None),
         ("Training records kept up to date.", True, None),
     ]),
    ("7. Self-Audit & Review",
     "Evaluate audit and review processes", [
         ("Annual vaccine storage self-audit completed (Strive for 5 Appendix 2).", True, None),
         ("Action plan developed for any deficiencies identified.", True, None),
         ("Previous corrective actions reviewed for effectiveness.", True, None),
         ("Policy/protocols reviewed and signed off within the past 12 months.", True, None),
     ]),
]


def _build_sections():
    sections = []
    for section_index, (title, description, items) in enumerate(_SECTIONS):
        section_items = []
        for item_index, (text, is_required, note) in enumerate(items):
            item = {'text': text, 'is_required': is_required, 'order_index': item_index}
            if note:
                item['note'] = note
            section_items.append(item)
        sections.append({
            'title': title,
            'description': description,
            'order_index': section_index,
            'items': section_items,
        })
    return sections


DEFAULT_COMPLIANCE_CHECKLIST = {'sections': _build_sections()}


def default_template_payload() -> dict:
    """A fresh, independently mutable copy of the seed as a template-creation payload."""
    return {
        'name': DEFAULT_TEMPLATE_NAME,
        'description': DEFAULT_TEMPLATE_DESCRIPTION,
        'version': DEFAULT_TEMPLATE_VERSION,
        'sections': _build_sections(),
    }
