from __future__ import annotations

from flask import Flask, request

from ..common.web import json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_mark")
    @login_required
    def mark(actor):
        data = json_body()
        record = service.mark_attendance(
            actor=actor,
            employee_id=data.get("employee"),
            work_date=data.get("date", ""),
            status=data.get("status"),
            check_in=data.get("checkIn"),
            check_out=data.get("checkOut"),
            is_night_duty=bool(data.get("isNightDuty", False)),
            remarks=data.get("remarks"),
        )
        return ok(record.to_dict(), message="Attendance marked successfully", status=201)

    @app.route("/api/attendance/bulk", methods=["POST"], endpoint="attendance_bulk")
    @login_required
    def mark_bulk(actor):
        data = json_body()
        results = service.mark_bulk(actor=actor, work_date=data.get("date", ""), records=data.get("attendanceData") or [])
        message = f"Marked {len(results['success'])} records, {len(results['failed'])} failed"
        return ok(results, message=message)

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @login_required
    def list_attendance(actor):
        records = service.list_attendance(
            actor=actor,
            employee_id=request.args.get("employee"),
            start_date=request.args.get("startDate"),
            end_date=request.args.get("endDate"),
            status=request.args.get("status"),
            department=request.args.get("department"),
        )
        return ok([r.to_dict() for r in records])

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @login_required
    def update(actor, attendance_id: int):
        record = service.update_attendance(actor=actor, attendance_id=attendance_id, changes=json_body())
        return ok(record.to_dict(), message="Attendance updated successfully")

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @login_required
    def delete(actor, attendance_id: int):
        service.delete_attendance(actor=actor, attendance_id=attendance_id)
        return ok(message="Attendance deleted successfully")

    @app.route("/api/attendance/summary/<int:employee_id>", methods=["GET"], endpoint="attendance_summary")
    @login_required
    def summary(actor, employee_id: int):
        result = service.monthly_summary(
            actor=actor,
            employee_id=employee_id,
            month=request.args.get("month"),
            year=request.args.get("year"),
        )
        return ok(result.to_dict())
