"""
Shared fixtures: sample distribution grids and in-memory workbooks
"""
import io

import pytest
from openpyxl import Workbook as OpenpyxlWorkbook


RICE_GRID = [
    ["PROVINCE OF BATAAN", "", ""],
    ["RICE DISTRIBUTION", "", ""],
    ["", "", "Rice (60)"],
    ["LGU", "BHSS Kitchen", "Rice"],
    ["Abucay", "", ""],
    ["", "Abucay Central School", "12"],
    ["", "Bangkal Elementary", 8],
    ["Abucay Total", "", 20],
    ["Orani", "", ""],
    ["", "Orani North School", "1,030"],
    ["", "Tala Elementary", ""],
    ["", "Total", "1,030"],
    ["Abucay", "", ""],
    ["", "Mabatang School", 10],
]

WATER_GRID = [
    ["WATER DISTRIBUTION", "", "", "Water (150)"],
    ["LGU", "BHSS Kitchen", "Beneficiaries", "Water", "Week 1", "Week 2", "Week 3", "Week 4", "Week 5", "Total"],
    ["Hermosa", "", "", "", "", "", "", "", "", ""],
    ["", "Hermosa Central", 120, 40, 10, 10, "", 10, 10, 40],
    ["", "Mabiga School", 90, 30, 6, 6, 6, 6, 6, 30],
    ["", "Empty School", "", "", "", "", "", "", "", ""],
    ["Dinalupihan", "", "", "", "", "", "", "", "", ""],
    ["", "Pag-asa School", "75", "80", "16", "16", "16", "16", "16", "80"],
]

LPG_GRID = [
    ["LPG DISTRIBUTION"],
    ["", "", "Gasul (9)"],
    ["Municipality", "BHSS Kitchen", "Gasul"],
    ["Limay", "", ""],
    ["", "Limay Central", 3],
    ["", "Lamao School", "2"],
    ["Mariveles", "", ""],
    ["", "Mariveles Kitchen School", 4],
    ["", "Total", 9],
]


@pytest.fixture
def rice_grid():
    return [list(row) for row in RICE_GRID]


@pytest.fixture
def water_grid():
    return [list(row) for row in WATER_GRID]


@pytest.fixture
def lpg_grid():
    return [list(row) for row in LPG_GRID]


def build_xlsx(sheets):
    """
    Build an .xlsx file in memory

    Args:
        sheets: Ordered dict-like of sheet name -> list of rows

    Returns:
        File contents as bytes
    """
    book = OpenpyxlWorkbook()
    book.remove(book.active)
    for name, rows in sheets.items():
        sheet = book.create_sheet(title=name)
        for row in rows:
            sheet.append([None if value == "" else value for value in row])

    buffer = io.BytesIO()
    book.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def rice_xlsx():
    return build_xlsx({"Summary": [["Cover sheet"]], "RICE": RICE_GRID})


@pytest.fixture
def make_xlsx():
    return build_xlsx
