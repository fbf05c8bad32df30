from __future__ import annotations

from flask import Flask, request

from ..common.web import json_body, login_required, ok
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.employee_service

    def _present(actor, employee):
        return employee.to_dict(include_documents=service.can_view_documents(actor, employee))

    @app.route("/api/employees", methods=["GET"], endpoint="employees_list")
    @login_required
    def list_employees(actor):
        employees = service.list_employees(
            actor=actor,
            department=request.args.get("department"),
            status=request.args.get("status"),
            search=request.args.get("search"),
        )
        return ok([_present(actor, e) for e in employees])

    @app.route("/api/employees", methods=["POST"], endpoint="employees_create")
    @login_required
    def create_employee(actor):
        employee = service.create_employee(actor=actor, data=json_body())
        return ok(_present(actor, employee), message="Employee created successfully", status=201)

    @app.route("/api/employees/search", methods=["GET"], endpoint="employees_search")
    @login_required
    def search_employees(actor):
        employees = service.search_employees(actor=actor, q=request.args.get("q", ""))
        return ok([e.to_dict(include_documents=False) for e in employees])

    @app.route("/api/employees/incomplete", methods=["GET"], endpoint="employees_incomplete")
    @login_required
    def incomplete_profiles(actor):
        employees = service.list_incomplete_profiles(actor=actor)
        return ok([e.to_dict(include_documents=False) for e in employees])

    @app.route("/api/employees/stats", methods=["GET"], endpoint="employees_stats")
    @login_required
    def employee_stats(actor):
        return ok(service.employee_stats(actor=actor))

    @app.route("/api/employees/<int:employee_id>", methods=["GET"], endpoint="employees_get")
    @login_required
    def get_employee(actor, employee_id: int):
        return ok(_present(actor, service.get_employee(actor=actor, employee_id=employee_id)))

    @app.route("/api/employees/<int:employee_id>", methods=["PUT"], endpoint="employees_update")
    @login_required
    def update_employee(actor, employee_id: int):
        employee = service.update_employee(actor=actor, employee_id=employee_id, changes=json_body())
        return ok(_present(actor, employee), message="Employee updated successfully")

    @app.route("/api/employees/<int:employee_id>", methods=["DELETE"], endpoint="employees_terminate")
    @login_required
    def terminate_employee(actor, employee_id: int):
        service.terminate_employee(actor=actor, employee_id=employee_id)
        return ok(message="Employee terminated successfully")

    @app.route("/api/employees/<int:employee_id>/documents", methods=["POST"], endpoint="employees_upload")
    @login_required
    def upload_document(actor, employee_id: int):
        """multipart/form-data, one file field named after the document kind."""
        if not request.files:
            raise ValidationError("No files uploaded")
        kind, storage = next(iter(request.files.items()))
        employee = service.upload_document(
            actor=actor,
            employee_id=employee_id,
            kind=kind,
            filename=storage.filename or kind,
            content=storage.read(),
        )
        return ok(_present(actor, employee), message="Document uploaded successfully")
