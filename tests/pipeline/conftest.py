# tests/pipeline/conftest.py
from __future__ import annotations

from pathlib import Path

import pytest

COMPANIES_CSV = """id;name;code;paid_up_capital;authorized_capital;status
root;Root Holding;RH;2000000000,00;5000000000;active
folder1;Folder One;F1;1000000000;1000000000;active
folder2;Folder Two;F2;500000000;;
old;Old Co;OC;10;10;inactive
bad;Bad Capital;BC;-5;0;active
;No Id;NI;1;1;active
root;Duplicate Root;RH2;1;1;active
"""

SHAREHOLDERS_CSV = """id;company_id;shareholder_company_id;type;name;identity_number;authorized_capital;paid_up_capital;is_main_parent
s1;folder1;root;company;Root Holding;;;;
s2;folder2;folder1;company;Folder One;;;;0
s3;folder2;;founder;Dana Reyes;ID-9;200;100;
s4;ghost;root;company;Root Holding;;;;
s5;folder1;;;Missing Capital;;;abc;
"""


def write_exports(input_dir: Path, companies: str = COMPANIES_CSV, shareholders: str = SHAREHOLDERS_CSV) -> None:
    input_dir.mkdir(parents=True, exist_ok=True)
    (input_dir / "companies.csv").write_text(companies, encoding="utf-8")
    (input_dir / "shareholders.csv").write_text(shareholders, encoding="utf-8")


@pytest.fixture()
def input_dir(tmp_path: Path) -> Path:
    """tmp_path/input holding the default companies.csv and shareholders.csv."""
    directory = tmp_path / "input"
    write_exports(directory)
    return directory
