import logging
from datetime import date

from pallet_reports.ingestion import record_from_submission, records_from_submissions
from pallet_reports.normalizer import normalize
from pallet_reports.schemas import OperationKind, Session, WeightMode


def submission(form_type="variable-weight-recepcion", **form_data):
    form_data.setdefault("nombreCliente", "ACME")
    form_data.setdefault("fecha", "2024-03-01T15:00:00.000Z")
    return {
        "id": "doc-1",
        "formType": form_type,
        "formData": form_data,
        "userDisplayName": "Operator",
    }


def test_operation_date_uses_local_day():
    # 03:00 UTC is still the previous evening in the warehouse.
    record = record_from_submission(submission(fecha="2024-03-02T03:00:00.000Z"))
    assert record.operation_date == date(2024, 3, 1)


def test_plain_date_is_taken_as_local():
    record = record_from_submission(submission(fecha="2024-03-02"))
    assert record.operation_date == date(2024, 3, 2)


def test_client_name_variants():
    legacy = submission()
    del legacy["formData"]["nombreCliente"]
    legacy["formData"]["cliente"] = " BETA "
    assert record_from_submission(legacy).client_name == "BETA"
    assert record_from_submission(submission()).client_name == "ACME"


def test_variable_reception_items():
    record = record_from_submission(
        submission(
            tipoPedido="GENERICO",
            pedidoSislog="P-77",
            items=[
                {"paleta": "1", "descripcion": "Pollo", "pesoNeto": "100.5", "temperatura": "-18"},
                {"paleta": 2, "descripcion": "Pollo", "pesoNeto": 99.5, "temperatura": -18},
            ],
        )
    )
    assert record.kind is OperationKind.RECEPTION
    assert record.weight_mode is WeightMode.VARIABLE
    assert record.order_number == "P-77"
    assert record.created_by == "Operator"
    assert normalize(record, Session.FROZEN) == (2, 200)


def test_summary_block_supplies_temperatures():
    record = record_from_submission(
        submission(
            items=[{"paleta": 0, "descripcion": "Queso ", "totalPaletas": 4, "totalPesoNeto": 800}],
            summary=[{"descripcion": "queso", "temperatura1": 5}],
        )
    )
    assert record.is_summary_form
    assert normalize(record, Session.REFRIGERATED) == (4, 800)
    assert normalize(record, Session.FROZEN) == (0, 0)


def test_dispatch_by_destination_reads_only_destinations():
    record = record_from_submission(
        submission(
            "variable-weight-despacho",
            despachoPorDestino=True,
            items=[{"paleta": 99}],
            destinos=[
                {"nombreDestino": "Bogota", "items": [{"paleta": 5}, {"paleta": 7}]},
                {"nombreDestino": "Cali", "items": [{"paleta": 7}]},
            ],
        )
    )
    assert record.kind is OperationKind.DISPATCH
    assert [group.label for group in record.item_groups] == ["Bogota", "Cali"]
    assert record.line_items == []
    assert normalize(record).pallet_count == 2


def test_plates_are_grouped():
    record = record_from_submission(
        submission(
            "variable-weight-despacho",
            items=[{"paleta": 1}],
            placas=[{"numeroPlaca": "ABC123", "items": [{"paleta": 2, "esPicking": True}]}],
        )
    )
    assert record.item_groups[0].label == "ABC123"
    assert normalize(record).pallet_count == 1


def test_processing_reception_releases_pallets():
    record = record_from_submission(
        submission(
            tipoPedido="maquila",
            salidaPaletasMaquilaCO="3",
            salidaPaletasMaquilaRE=0,
            items=[{"paleta": 1}],
        )
    )
    assert record.processed_output == {Session.FROZEN: 3}


def test_processing_output_ignored_on_dispatch():
    record = record_from_submission(
        submission("variable-weight-despacho", tipoPedido="MAQUILA", salidaPaletasMaquilaCO=3)
    )
    assert record.processed_output == {}


def test_fixed_weight_dispatch_counts_full_pallets():
    record = record_from_submission(
        submission(
            "fixed-weight-despacho",
            productos=[
                {"descripcion": "Caja", "paletasCompletas": 2, "totalPaletas": 9, "pesoNeto": 400},
                {"descripcion": "Caja", "paletasCompletas": "1", "pesoNetoKg": 100},
            ],
        )
    )
    assert record.weight_mode is WeightMode.FIXED
    assert normalize(record) == (3, 500)


def test_fixed_weight_reception_counts_total_pallets():
    record = record_from_submission(
        submission("fixed-weight-reception", productos=[{"totalPaletas": 4, "pesoNeto": 10}])
    )
    assert normalize(record).pallet_count == 4


def test_unusable_documents_are_skipped(caplog):
    no_client = submission(nombreCliente="  ")
    no_form = {"id": "x", "formType": "variable-weight-recepcion"}
    bad_date = submission(fecha="not a date")
    documents = [submission("temperature-log"), no_client, no_form, bad_date, submission()]

    with caplog.at_level(logging.WARNING):
        records = records_from_submissions(documents)

    assert len(records) == 1
    assert "unrecognized form type 'temperature-log'" in caplog.text
    assert "no client name" in caplog.text
