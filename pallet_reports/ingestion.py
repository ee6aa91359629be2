"""
Adapters from stored documents to the canonical report inputs.

Submission documents come in several historical shapes (``cliente`` vs
``nombreCliente``, ``recepcion`` vs ``reception`` form types, items grouped by
destination or by vehicle plate). Everything is mapped here, once, so the
report code only ever sees ``OperationRecord`` and ``InventorySnapshot``.
"""

import logging
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from . import settings, utils
from .schemas import (
    InventoryRow,
    InventorySnapshot,
    ItemGroup,
    LineItem,
    OperationKind,
    OperationRecord,
    Session,
    WeightMode,
)

logger = logging.getLogger(__name__)

FORM_TYPES = {
    "fixed-weight-recepcion": (WeightMode.FIXED, OperationKind.RECEPTION),
    "fixed-weight-reception": (WeightMode.FIXED, OperationKind.RECEPTION),
    "fixed-weight-despacho": (WeightMode.FIXED, OperationKind.DISPATCH),
    "variable-weight-recepcion": (WeightMode.VARIABLE, OperationKind.RECEPTION),
    "variable-weight-reception": (WeightMode.VARIABLE, OperationKind.RECEPTION),
    "variable-weight-despacho": (WeightMode.VARIABLE, OperationKind.DISPATCH),
}

# Inventory file column -> canonical row field.
INVENTORY_COLUMNS = {
    "PROPIETARIO": "owner",
    "PALETA": "pallet_id",
    "SE": "session",
}


def _first(data: Mapping, *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return default


def _summary_temperatures(form_data: Mapping) -> dict[str, Any]:
    """Temperature recorded per product description in the form's summary block."""
    temperatures = {}
    for entry in form_data.get("summary") or []:
        if not isinstance(entry, Mapping):
            continue
        description = str(entry.get("descripcion") or "").strip().lower()
        if description:
            temperatures[description] = _first(entry, "temperatura", "temperatura1")
    return temperatures


def _line_item(
    raw: Mapping,
    weight_mode: WeightMode,
    kind: OperationKind,
    temperatures: dict[str, Any],
) -> LineItem:
    description = raw.get("descripcion")
    temperature = _first(raw, "temperatura", "temperatura1")
    if temperature is None:
        temperature = temperatures.get(str(description or "").strip().lower())

    if weight_mode is WeightMode.FIXED:
        if kind is OperationKind.DISPATCH:
            pallets = raw.get("paletasCompletas")
        else:
            pallets = _first(raw, "totalPaletas", "paletas")
        return LineItem(
            description=description,
            lot=raw.get("lote"),
            presentation=raw.get("presentacion"),
            pallets=pallets,
            net_weight=_first(raw, "pesoNeto", "pesoNetoKg"),
            temperature=temperature,
        )

    if kind is OperationKind.DISPATCH:
        total_pallets = _first(raw, "paletasCompletas", "totalPaletas")
    else:
        total_pallets = raw.get("totalPaletas")
    return LineItem(
        pallet_id=raw.get("paleta"),
        description=description,
        lot=raw.get("lote"),
        presentation=raw.get("presentacion"),
        quantity_per_pallet=raw.get("cantidadPorPaleta"),
        gross_weight=raw.get("pesoBruto"),
        tara_pallet=raw.get("taraEstiba"),
        tara_box=raw.get("taraCaja"),
        net_weight=raw.get("pesoNeto"),
        total_pallets=total_pallets,
        total_net_weight=raw.get("totalPesoNeto"),
        temperature=temperature,
        is_picking=raw.get("esPicking", False),
    )


def _items(raw_items: Any, *args) -> list[LineItem]:
    if not isinstance(raw_items, list):
        return []
    return [_line_item(raw, *args) for raw in raw_items if isinstance(raw, Mapping)]


def _item_groups(form_data: Mapping, *args) -> list[ItemGroup]:
    groups = []
    for destination in form_data.get("destinos") or []:
        if isinstance(destination, Mapping):
            groups.append(
                ItemGroup(
                    label=str(_first(destination, "nombreDestino", "destino", default="")),
                    items=_items(destination.get("items"), *args),
                )
            )
    for plate in form_data.get("placas") or []:
        if isinstance(plate, Mapping):
            groups.append(
                ItemGroup(
                    label=str(plate.get("numeroPlaca") or ""),
                    items=_items(plate.get("items"), *args),
                )
            )
    return groups


def _processed_output(form_data: Mapping, kind: OperationKind) -> dict[Session, int]:
    order_type = str(form_data.get("tipoPedido") or "").strip().upper()
    if kind is not OperationKind.RECEPTION or order_type != settings.PROCESSING_ORDER_TYPE:
        return {}
    output = {}
    for code in settings.SESSION_ORDER:
        pallets = utils.to_int(form_data.get(f"salidaPaletasMaquila{code}"))
        if pallets > 0:
            output[Session(code)] = pallets
    return output


def record_from_submission(document: Mapping) -> OperationRecord | None:
    """
    Maps one stored submission to an OperationRecord.
    Returns None (and logs why) for documents that cannot feed a report.
    """
    document_id = str(document.get("id") or "")
    form_type = str(document.get("formType") or "").strip().lower()
    if form_type not in FORM_TYPES:
        logger.warning(f"⚠️ Submission {document_id}: unrecognized form type '{form_type}', skipped.")
        return None
    weight_mode, kind = FORM_TYPES[form_type]

    form_data = document.get("formData")
    if not isinstance(form_data, Mapping):
        logger.warning(f"⚠️ Submission {document_id}: missing form data, skipped.")
        return None

    client = _first(form_data, "nombreCliente", "cliente")
    if client is None or not str(client).strip():
        logger.warning(f"⚠️ Submission {document_id}: no client name, skipped.")
        return None

    operation_date = utils.to_local_date(form_data.get("fecha"))
    if operation_date is None:
        logger.warning(f"⚠️ Submission {document_id}: no operation date, skipped.")
        return None

    item_args = (weight_mode, kind, _summary_temperatures(form_data))
    try:
        if weight_mode is WeightMode.FIXED:
            line_items = _items(form_data.get("productos"), *item_args)
            item_groups = []
        elif form_data.get("despachoPorDestino") is True:
            # Items of a per-destination dispatch live only under its destinations.
            line_items = []
            item_groups = _item_groups(form_data, *item_args)
        else:
            line_items = _items(form_data.get("items"), *item_args)
            item_groups = _item_groups(form_data, *item_args)

        return OperationRecord(
            id=document_id,
            client_name=client,
            kind=kind,
            weight_mode=weight_mode,
            operation_date=operation_date,
            line_items=line_items,
            item_groups=item_groups,
            order_type=form_data.get("tipoPedido"),
            order_number=form_data.get("pedidoSislog"),
            created_by=document.get("userDisplayName"),
            processed_output=_processed_output(form_data, kind),
        )
    except ValidationError as e:
        logger.warning(f"⚠️ Submission {document_id}: invalid record, skipped. {e}")
        return None


def records_from_submissions(documents: Iterable[Mapping]) -> list[OperationRecord]:
    records = []
    skipped = 0
    for document in documents:
        record = record_from_submission(document)
        if record is None:
            skipped += 1
            continue
        records.append(record)
    if skipped:
        logger.info(f"  > {skipped} submission(s) skipped, {len(records)} usable.")
    return records


def inventory_row_from_columns(raw: Mapping) -> InventoryRow:
    """One row of an uploaded inventory file (PROPIETARIO/PALETA/SE + other columns)."""
    fields: dict[str, Any] = {}
    extra: dict[str, Any] = {}
    for key, value in raw.items():
        column = str(key).strip()
        if column in INVENTORY_COLUMNS:
            fields[INVENTORY_COLUMNS[column]] = value
        else:
            extra[column] = value
    return InventoryRow(**fields, extra=extra)


def snapshot_from_document(document: Mapping) -> InventorySnapshot | None:
    """
    Builds a snapshot from a stored daily inventory document, either the
    canonical {date, rows} shape or the upload shape {date, data: [columns]}.
    """
    day = utils.parse_report_date(document.get("date"))
    raw_rows = document.get("rows", document.get("data"))
    if day is None or not isinstance(raw_rows, list):
        logger.warning(
            f"⚠️ Inventory document with wrong shape or missing date skipped: {document.get('date')!r}"
        )
        return None

    try:
        rows = []
        for raw in raw_rows:
            if isinstance(raw, InventoryRow):
                rows.append(raw)
            elif isinstance(raw, Mapping):
                if "owner" in raw:
                    rows.append(InventoryRow.model_validate(raw))
                else:
                    rows.append(inventory_row_from_columns(raw))

        return InventorySnapshot(date=day, rows=rows, uploaded_at=document.get("uploadedAt"))
    except ValidationError as e:
        logger.warning(f"⚠️ Inventory document {day} is invalid, skipped. {e}")
        return None
