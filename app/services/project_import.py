"""Import projects from the installer's Excel export.

Each row becomes one project. A bad row is reported as ``Row <n>: <reason>``
and the import carries on with the next one.
"""

import io
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Mapping, Optional

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.project import Project, ProjectStageHistory, FIRST_STAGE, FINAL_STAGE
from app.services.projects import record_stage_history

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ["xlsx", "xlsm"]
EXCEL_EPOCH = datetime(1899, 12, 30)
IMPORTED_BY = "data_import"

# Latest milestone reached wins.
STAGE_MILESTONES: list[tuple[str, int]] = [
    ("Install Completed Date", FINAL_STAGE),
    ("Installation Scheduled Date", 6),
    ("Permit Approved Date", 4),
    ("Site Survey Scheduled Date", 2),
]


class RowError(ValueError):
    """A spreadsheet row cannot become a project."""


@dataclass
class ImportResult:
    total: int = 0
    successful: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    def fail(self, row_number: int, reason: str) -> None:
        self.failed += 1
        self.errors.append(f"Row {row_number}: {reason}")


def read_workbook(data: bytes) -> pd.DataFrame:
    """First sheet of an .xlsx workbook, one dict-like row per project."""
    return pd.read_excel(io.BytesIO(data), sheet_name=0, engine="openpyxl")


def clean_value(value: Any) -> Any:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def parse_excel_date(value: Any) -> Optional[str]:
    """ISO date for an Excel serial number, a date or a date string; None otherwise."""
    value = clean_value(value)
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (datetime, date)):
            return value.strftime("%Y-%m-%d")
        if isinstance(value, (int, float)):
            return (EXCEL_EPOCH + timedelta(days=float(value))).strftime("%Y-%m-%d")
        if isinstance(value, str):
            parsed = pd.to_datetime(value, errors="coerce")
            return None if pd.isna(parsed) else parsed.strftime("%Y-%m-%d")
    except (ValueError, OverflowError) as e:
        logger.debug("Unparseable date %r: %s", value, e)
    return None


def parse_number(value: Any) -> Optional[float]:
    value = clean_value(value)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(re.sub(r"[$,]", "", str(value)))
    except ValueError:
        return None


def determine_stage(row: Mapping[str, Any]) -> int:
    for column, stage in STAGE_MILESTONES:
        if clean_value(row.get(column)) is not None:
            return stage
    return FIRST_STAGE


def _text(value: Any) -> Optional[str]:
    value = clean_value(value)
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def row_to_project(row: Mapping[str, Any]) -> dict:
    """Project column values for one row. Raises RowError."""
    name_parts = [_text(row.get("First Name")), _text(row.get("Last Name"))]
    customer_name = " ".join(p for p in name_parts if p).strip()
    if not customer_name:
        raise RowError("Missing customer name")

    address_parts = [_text(row.get(c)) for c in ("Address", "City", "State", "Zip Code")]
    address = ", ".join(p for p in address_parts if p)
    if not address:
        raise RowError("Missing address information")

    stage = determine_stage(row)
    completed = parse_excel_date(row.get("Install Completed Date"))
    contract_signed = parse_excel_date(row.get("Created Date"))
    external_id = _text(row.get("GoodPWR Project Identification Number"))
    return {
        "external_id": external_id,
        "customer_name": customer_name,
        "customer_email": _text(row.get("Primary Contact Email")),
        "customer_phone": _text(row.get("Primary Contact Phone")),
        "address": address,
        "system_size_kw": parse_number(row.get("Project Size")),
        "project_value": parse_number(row.get("Contract Value")),
        "contract_signed_date": date.fromisoformat(contract_signed) if contract_signed else None,
        "actual_completion_date": date.fromisoformat(completed) if completed else None,
        "current_stage": stage,
        "overall_status": "complete" if clean_value(row.get("Install Completed Date")) is not None else "active",
        "notes": f"Imported from GoodPWR Data - Original ID: {external_id}",
    }


async def import_projects(db: AsyncSession, dataframe: pd.DataFrame) -> ImportResult:
    """Insert one project per row, each in its own transaction.

    The stage history row is written afterwards; its failure is logged and
    the project still counts as imported.
    """
    result = ImportResult(total=len(dataframe.index))
    rows = dataframe.to_dict(orient="records")

    for number, row in enumerate(rows, start=1):
        try:
            values = row_to_project(row)
        except RowError as e:
            result.fail(number, str(e))
            continue

        project = Project(**values)
        db.add(project)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Import row %d failed: %s", number, e)
            result.fail(number, str(e))
            continue

        await record_stage_history(db, ProjectStageHistory(
            project_id=project.id,
            stage_id=values["current_stage"],
            notes="Imported from GoodPWR data",
            completed_by=IMPORTED_BY,
        ))
        result.successful += 1
        if number % 10 == 0:
            logger.info("Imported %d of %d rows", number, result.total)

    logger.info("Project import finished: %d successful, %d failed", result.successful, result.failed)
    return result
