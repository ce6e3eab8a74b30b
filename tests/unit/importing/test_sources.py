from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from member_directory.importing.normalizer import (
    _ALIASES,
    normalize_key,
    normalize_rows,
)
from member_directory.importing.sources import load_rows, write_template


def test_load_csv(tmp_path: Path):
    path = tmp_path / "members.csv"
    path.write_text(
        "Full Name,Phone,Email,Area\n"
        "Ann Mensah,0244000001,ann@example.com,Osu\n"
        "Kofi Boateng,0244000002,,\n"
        ",,,\n"
        "Ama Darko, 0244000003 ,ama@example.com,Labone\n"
    )

    rows = load_rows(path)

    assert rows == [
        {
            "Full Name": "Ann Mensah",
            "Phone": "0244000001",
            "Email": "ann@example.com",
            "Area": "Osu",
        },
        {"Full Name": "Kofi Boateng", "Phone": "0244000002"},
        {
            "Full Name": "Ama Darko",
            "Phone": "0244000003",
            "Email": "ama@example.com",
            "Area": "Labone",
        },
    ]


def test_load_xlsx(tmp_path: Path):
    path = tmp_path / "visitors.xlsx"
    pd.DataFrame(
        [
            {"Name": "Kojo", "Mobile": "0200000001"},
            {"Name": "Esi", "Mobile": None},
        ]
    ).to_excel(path, index=False)

    rows = load_rows(path)

    assert rows == [
        {"Name": "Kojo", "Mobile": "0200000001"},
        {"Name": "Esi"},
    ]


def test_unsupported_extension(tmp_path: Path):
    path = tmp_path / "members.json"
    path.write_text("[]")
    with pytest.raises(ValueError, match="Unsupported file type"):
        load_rows(path)


def test_template_round_trips_through_the_normalizer(tmp_path: Path):
    path = write_template(tmp_path / "template.csv", "visitor")

    header = path.read_text().strip().split(",")
    assert header[:3] == ["full_name", "email", "phone"]
    assert "service_date" in header
    assert load_rows(path) == []

    for column in header:
        assert normalize_key(column) in _ALIASES


def test_row_numbers_count_data_rows(tmp_path: Path):
    path = tmp_path / "members.csv"
    path.write_text(
        "Full Name,Phone\n"
        "Ann Mensah,0244000001\n"
        ",\n"
        "Kofi Boateng,\n"
    )

    result = normalize_rows(load_rows(path), category="member", branch_id="accra")

    # the blank line is gone, so Kofi is data row 2 although the sheet line is 4
    assert result.total_rows == 2
    assert result.rejected_rows == [2]
