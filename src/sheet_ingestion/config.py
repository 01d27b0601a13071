"""
Configuration for distribution sheet ingestion
Template markers, scan windows and fallback column positions
"""

# Commodities with an importable distribution template
COMMODITIES = ('rice', 'water', 'lpg')

# Title text that identifies each template (matched case-insensitively)
TEMPLATE_MARKERS = {
    'rice': 'rice distribution',
    'water': 'water distribution',
    'lpg': 'lpg distribution',
}

# Rows scanned for the template title
TEMPLATE_SCAN_ROWS = 12

# Parenthesized header totals, e.g. "Rice (1389)" or "Gasul (42)"
HEADER_TOTAL_PATTERNS = {
    'rice': r'rice\s*\(?\s*(\d+(?:[.,]\d+)?)\s*\)?',
    'water': r'water\s*\((\d+(?:[.,]\d+)?)\)',
    'lpg': r'gasul\s*\((\d+(?:[.,]\d+)?)\)',
}

# Rows scanned for the header total
HEADER_TOTAL_SCAN_ROWS = {
    'rice': 5,
    'water': 12,
    'lpg': 12,
}

# Column marker labels (lower-case)
LGU_LABEL = 'lgu'
KITCHEN_LABEL = 'bhss kitchen'
GASUL_LABEL = 'gasul'
TOTAL_LABEL = 'total'
MUNICIPALITY_LABEL = 'municipality'

# Rice: the "LGU" + "BHSS Kitchen" label row must appear within these rows
RICE_LABEL_ROW_SCAN_ROWS = 15

# LPG: independent searches for the gasul and kitchen columns
LPG_GASUL_SCAN_ROWS = 20
LPG_KITCHEN_SCAN_ROWS = 30

# Fallback column positions when no marker is found
FALLBACK_MUNICIPALITY_COLUMN = 0
FALLBACK_KITCHEN_COLUMN = 1
FALLBACK_QUANTITY_COLUMN = 2

# Water template has no label detection: fixed layout
WATER_COLUMNS = {
    'beneficiaries': 2,
    'water': 3,
    'week1': 4,
    'week2': 5,
    'week3': 6,
    'week4': 7,
    'week5': 8,
    'total': 9,
}

# Workbook files accepted for import
ALLOWED_EXTENSIONS = ['.xlsx', '.xls', '.xlsm']

# Default kitchen name sent with saved batches
DEFAULT_KITCHEN_NAME = 'BHSS Kitchen'
