from __future__ import annotations

import csv
import io
from typing import Iterable, Sequence

import pandas as pd

SALARY_REGISTER_COLUMNS = {
    "employeeId": "Employee ID",
    "name": "Name",
    "department": "Department",
    "basicSalary": "Basic",
    "hra": "HRA",
    "otherAllowances": "Other Allowances",
    "nightDutyAllowance": "Night Duty",
    "totalIncentives": "Incentives",
    "grossSalary": "Gross",
    "providentFund": "PF",
    "esi": "ESI",
    "totalAdvances": "Advances",
    "totalDeductions": "Deductions",
    "netSalary": "Net",
    "paymentStatus": "Status",
}

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def rows_to_csv(rows: Iterable[dict], fieldnames: Sequence[str]) -> bytes:
    """UTF-8 with BOM so spreadsheet apps pick the right encoding."""
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=list(fieldnames), extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return out.getvalue().encode("utf-8-sig")


def salary_register_rows(report_rows: Iterable[dict]) -> list[dict]:
    """Flatten salary report rows (employee ref + salary) for export."""
    flat = []
    for r in report_rows:
        employee = r.get("employee") or {}
        flat.append(
            {
                **{k: r.get(k) for k in SALARY_REGISTER_COLUMNS},
                "employeeId": employee.get("id"),
                "name": employee.get("name"),
                "department": employee.get("department"),
            }
        )
    return flat


def salary_register_xlsx(report_rows: Iterable[dict], *, sheet_name: str = "Salary Register") -> bytes:
    df = pd.DataFrame(salary_register_rows(report_rows), columns=list(SALARY_REGISTER_COLUMNS))
    df = df.rename(columns=SALARY_REGISTER_COLUMNS)

    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    return out.getvalue()
