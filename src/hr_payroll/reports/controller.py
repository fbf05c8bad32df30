from __future__ import annotations

from flask import Flask, request

from ..common.web import login_required, ok
from ..container import Container
from .export import SALARY_REGISTER_COLUMNS, XLSX_MIMETYPE, rows_to_csv, salary_register_rows, salary_register_xlsx


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    def _attachment(payload: bytes, *, mimetype: str, filename: str):
        return app.response_class(
            payload,
            mimetype=mimetype,
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/reports/salary", methods=["GET"], endpoint="report_salary")
    @login_required
    def salary_report(actor):
        report = reports.salary_report(
            actor=actor,
            month=request.args.get("month"),
            year=request.args.get("year"),
            department=request.args.get("department"),
            payment_status=request.args.get("paymentStatus"),
        )
        fmt = (request.args.get("format") or "").lower()
        stem = f"salary_register_{report.filters['year']}_{report.filters['month']:02d}"
        if fmt == "csv":
            payload = rows_to_csv(salary_register_rows(report.rows), list(SALARY_REGISTER_COLUMNS))
            return _attachment(payload, mimetype="text/csv", filename=f"{stem}.csv")
        if fmt == "xlsx":
            return _attachment(salary_register_xlsx(report.rows), mimetype=XLSX_MIMETYPE, filename=f"{stem}.xlsx")
        return ok(report.to_dict())

    @app.route("/api/reports/attendance", methods=["GET"], endpoint="report_attendance")
    @login_required
    def attendance_report(actor):
        report = reports.attendance_report(
            actor=actor,
            start_date=request.args.get("startDate"),
            end_date=request.args.get("endDate"),
            department=request.args.get("department"),
            employee_code=request.args.get("employeeId"),
        )
        return ok(report.to_dict())

    @app.route("/api/reports/pf-esi", methods=["GET"], endpoint="report_pf_esi")
    @login_required
    def pf_esi_report(actor):
        report = reports.pf_esi_report(actor=actor, month=request.args.get("month"), year=request.args.get("year"))
        return ok(report.to_dict())

    @app.route("/api/reports/incentives", methods=["GET"], endpoint="report_incentives")
    @login_required
    def incentive_report(actor):
        report = reports.incentive_report(
            actor=actor,
            month=request.args.get("month"),
            year=request.args.get("year"),
            type=request.args.get("type"),
            status=request.args.get("status"),
        )
        return ok(report.to_dict())

    @app.route("/api/reports/deductions", methods=["GET"], endpoint="report_deductions")
    @login_required
    def deduction_report(actor):
        report = reports.deduction_report(
            actor=actor,
            month=request.args.get("month"),
            year=request.args.get("year"),
            type=request.args.get("type"),
            status=request.args.get("status"),
        )
        return ok(report.to_dict())

    @app.route("/api/reports/increments", methods=["GET"], endpoint="report_increments")
    @login_required
    def increment_report(actor):
        report = reports.increment_report(
            actor=actor,
            year=request.args.get("year"),
            reason=request.args.get("reason"),
            employee_code=request.args.get("employeeId"),
        )
        return ok(report.to_dict())

    @app.route("/api/reports/advances", methods=["GET"], endpoint="report_advances")
    @login_required
    def advance_report(actor):
        report = reports.advance_report(
            actor=actor,
            status=request.args.get("status"),
            repayment_status=request.args.get("repaymentStatus"),
            employee_code=request.args.get("employeeId"),
        )
        return ok(report.to_dict())

    @app.route("/api/reports/employees", methods=["GET"], endpoint="report_employees")
    @login_required
    def employee_report(actor):
        report = reports.employee_report(
            actor=actor,
            department=request.args.get("department"),
            status=request.args.get("status"),
            salary_type=request.args.get("salaryType"),
        )
        return ok(report.to_dict())

    @app.route("/api/dashboard/metrics", methods=["GET"], endpoint="dashboard_metrics")
    @login_required
    def dashboard_metrics(actor):
        return ok(reports.dashboard_metrics(actor=actor))

    @app.route("/api/dashboard/monthly-summary", methods=["GET"], endpoint="dashboard_monthly")
    @login_required
    def monthly_summary(actor):
        return ok(reports.monthly_summary(actor=actor, month=request.args.get("month"), year=request.args.get("year")))

    @app.route("/api/dashboard/department-summary", methods=["GET"], endpoint="dashboard_departments")
    @login_required
    def department_summary(actor):
        return ok(reports.department_summary(actor=actor))
