import json
from datetime import date

from pallet_reports import parsers
from pallet_reports.schemas import DateRange


def write_inventory(path, header, *lines):
    path.write_text("\n".join([header, *lines]) + "\n", encoding="utf-8")
    return path


def test_parse_inventory_report(tmp_path):
    path = write_inventory(
        tmp_path / "inventario_0115.csv",
        " FECHA , PROPIETARIO ,PALETA,SE,LOTE",
        "15/01/24,ACME,1,CO,L1",
        "15/01/24,ACME,1,CO,L2",
        "15/01/24,BETA,7,RE,",
    )
    snapshot = parsers.parse_inventory_report(path)

    assert snapshot.date == date(2024, 1, 15)
    assert len(snapshot.rows) == 3
    assert snapshot.rows[0].owner == "ACME"
    assert snapshot.rows[0].pallet_id == "1"
    assert snapshot.rows[2].extra["LOTE"] is None


def test_inventory_report_missing_columns(tmp_path, caplog):
    path = write_inventory(tmp_path / "inventario_bad.csv", "FECHA,PROPIETARIO", "15/01/24,ACME")
    assert parsers.parse_inventory_report(path) is None
    assert "missing columns: PALETA, SE" in caplog.text


def test_inventory_report_unreadable_date(tmp_path):
    path = write_inventory(
        tmp_path / "inventario_x.csv", "FECHA,PROPIETARIO,PALETA,SE", "someday,ACME,1,CO"
    )
    assert parsers.parse_inventory_report(path) is None


def test_inventory_report_latin1_file(tmp_path):
    path = tmp_path / "inventario_latin.csv"
    path.write_bytes("FECHA,PROPIETARIO,PALETA,SE\n2024-01-15,CAFÉ S.A.,3,SE\n".encode("latin-1"))
    snapshot = parsers.parse_inventory_report(path)
    assert snapshot.rows[0].owner == "CAFÉ S.A."


def test_load_submissions_shapes(tmp_path):
    listed = tmp_path / "listed.json"
    listed.write_text(json.dumps([{"id": "a"}, "noise"]), encoding="utf-8")
    wrapped = tmp_path / "wrapped.json"
    wrapped.write_text(json.dumps({"submissions": [{"id": "b"}]}), encoding="utf-8")

    assert parsers.load_submissions(listed) == [{"id": "a"}]
    assert parsers.load_submissions(wrapped) == [{"id": "b"}]
    assert parsers.load_submissions(tmp_path / "missing.json") == []


def test_load_repositories(tmp_path):
    submissions = [
        {
            "id": "r1",
            "formType": "variable-weight-recepcion",
            "formData": {"nombreCliente": "ACME", "fecha": "2024-01-16", "items": [{"paleta": 1}]},
        },
        {"id": "junk", "formType": "unknown"},
    ]
    (tmp_path / "submissions.json").write_text(json.dumps(submissions), encoding="utf-8")
    write_inventory(tmp_path / "inventario_a.csv", "FECHA,PROPIETARIO,PALETA,SE", "15/01/24,ACME,1,CO")
    # Uploading the same day again replaces the earlier rows.
    write_inventory(
        tmp_path / "inventario_b.csv",
        "FECHA,PROPIETARIO,PALETA,SE",
        "15/01/24,ACME,1,CO",
        "15/01/24,ACME,2,CO",
    )
    write_inventory(tmp_path / "other.csv", "FECHA,PROPIETARIO,PALETA,SE", "16/01/24,ACME,9,CO")

    operations, snapshots = parsers.load_repositories(tmp_path)
    january = DateRange(start=date(2024, 1, 1), end=date(2024, 1, 31))

    assert [record.id for record in operations.fetch_operations(january)] == ["r1"]
    assert operations.fetch_operations(january, client="beta") == []
    [snapshot] = snapshots.fetch_snapshots(january)
    assert len(snapshot.rows) == 2
    assert snapshots.latest_before(date(2024, 1, 16)).date == date(2024, 1, 15)
    assert snapshots.latest_before(date(2024, 1, 15)) is None
