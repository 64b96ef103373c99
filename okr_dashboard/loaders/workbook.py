"""
Loader for the dashboard data export workbook.

The workbook holds one sheet per collection:
    Owners     id, name, email, user_id
    Customers  id, name, csm_id, managed_services, department_id
    Scores     customer_id, period, value, feature_id, indicator_id

The header row may sit below a title block; it is located by matching
known column names. Data runs from the row after the header until the
first fully blank row.
"""

import logging

import openpyxl

from ..config import (
    CUSTOMERS_HEADER_SIGNATURE,
    CUSTOMERS_SHEET,
    OWNERS_HEADER_SIGNATURE,
    OWNERS_SHEET,
    SCORES_HEADER_SIGNATURE,
    SCORES_SHEET,
)
from ..models import Entity, EntityId, Owner, OwnerId, SubmissionRecord
from .utils import (
    find_header_row,
    normalise_period,
    safe_bool,
    safe_float,
    safe_str,
    to_snake_case,
)

logger = logging.getLogger(__name__)


def _open(path: str):
    try:
        return openpyxl.load_workbook(path, data_only=True, read_only=False)
    except Exception:
        logger.exception("Failed to open workbook: %s", path)
        raise


def _read_sheet(wb, sheet_name: str, signature: set[str]) -> list[dict]:
    """Return one dict per data row, keyed by snake_case header."""
    if sheet_name not in wb.sheetnames:
        logger.warning("Sheet '%s' not found — treating it as empty", sheet_name)
        return []

    ws = wb[sheet_name]
    header_row = find_header_row(ws, signature)
    if header_row is None:
        logger.warning("No header row found on sheet '%s'", sheet_name)
        return []

    headers = {
        cell.column: to_snake_case(cell.value)
        for cell in ws[header_row]
        if cell.value is not None
    }

    records = []
    for row in ws.iter_rows(min_row=header_row + 1):
        values = {headers[c.column]: c.value for c in row if c.column in headers}
        if all(v is None for v in values.values()):
            break
        records.append(values)

    logger.info("Read %d rows from sheet '%s'", len(records), sheet_name)
    return records


def _load_owners(wb) -> list[Owner]:
    owners = []
    for raw in _read_sheet(wb, OWNERS_SHEET, OWNERS_HEADER_SIGNATURE):
        owner_id = safe_str(raw.get("id"))
        if owner_id is None:
            logger.warning("Skipping owner row without id: %s", raw)
            continue
        owners.append(Owner(
            id=OwnerId(owner_id),
            name=safe_str(raw.get("name")) or owner_id,
            email=safe_str(raw.get("email")),
            user_id=safe_str(raw.get("user_id")),
        ))
    return owners


def _load_customers(wb) -> list[Entity]:
    customers = []
    for raw in _read_sheet(wb, CUSTOMERS_SHEET, CUSTOMERS_HEADER_SIGNATURE):
        customer_id = safe_str(raw.get("id"))
        if customer_id is None:
            logger.warning("Skipping customer row without id: %s", raw)
            continue
        csm_id = safe_str(raw.get("csm_id"))
        customers.append(Entity(
            id=EntityId(customer_id),
            name=safe_str(raw.get("name")) or customer_id,
            owner_id=OwnerId(csm_id) if csm_id else None,
            managed_services=safe_bool(raw.get("managed_services")),
            department_id=safe_str(raw.get("department_id")),
        ))
    return customers


def _load_scores(wb) -> list[SubmissionRecord]:
    scores = []
    for raw in _read_sheet(wb, SCORES_SHEET, SCORES_HEADER_SIGNATURE):
        customer_id = safe_str(raw.get("customer_id"))
        if customer_id is None:
            logger.warning("Skipping score row without customer_id: %s", raw)
            continue
        scores.append(SubmissionRecord(
            entity_id=EntityId(customer_id),
            period=normalise_period(raw.get("period")),
            value=safe_float(raw.get("value")),
            feature_id=safe_str(raw.get("feature_id")),
            indicator_id=safe_str(raw.get("indicator_id")),
        ))
    return scores


def load_owners(path: str) -> list[Owner]:
    """Load the Owners sheet."""
    wb = _open(path)
    try:
        return _load_owners(wb)
    finally:
        wb.close()


def load_customers(path: str) -> list[Entity]:
    """Load the Customers sheet. A blank csm_id means the customer is unowned."""
    wb = _open(path)
    try:
        return _load_customers(wb)
    finally:
        wb.close()


def load_scores(path: str) -> list[SubmissionRecord]:
    """Load the Scores sheet.

    Date-typed period cells are converted to 'YYYY-MM'; text periods are
    passed through as-is so malformed keys can be counted downstream.
    """
    wb = _open(path)
    try:
        return _load_scores(wb)
    finally:
        wb.close()


def load_workbook_records(
    path: str,
) -> tuple[list[Owner], list[Entity], list[SubmissionRecord]]:
    """Load owners, customers and scores from one workbook in a single open."""
    wb = _open(path)
    try:
        owners = _load_owners(wb)
        customers = _load_customers(wb)
        scores = _load_scores(wb)
    finally:
        wb.close()

    logger.info(
        "Loaded %d owners, %d customers, %d scores from %s",
        len(owners), len(customers), len(scores), path,
    )
    return owners, customers, scores
