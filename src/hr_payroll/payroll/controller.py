from __future__ import annotations

from flask import Flask, request

from ..common.web import json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    salaries = container.salary_service
    adjustments = container.adjustment_service
    advances = container.advance_service
    increments = container.increment_service

    @app.route("/api/salary/generate", methods=["POST"], endpoint="salary_generate")
    @login_required
    def generate(actor):
        data = json_body()
        salary = container.salary_generator.generate(
            actor=actor,
            employee_id=data.get("employeeId"),
            month=data.get("month"),
            year=data.get("year"),
            remarks=data.get("remarks"),
        )
        return ok(salary.to_dict(), message="Salary generated successfully", status=201)

    @app.route("/api/salary", methods=["GET"], endpoint="salary_list")
    @login_required
    def list_salaries(actor):
        items = salaries.list_salaries(
            actor=actor,
            employee_id=request.args.get("employee"),
            month=request.args.get("month"),
            year=request.args.get("year"),
            payment_status=request.args.get("paymentStatus"),
            department=request.args.get("department"),
        )
        return ok([s.to_dict() for s in items])

    @app.route("/api/salary/<int:salary_id>", methods=["GET"], endpoint="salary_get")
    @login_required
    def get_salary(actor, salary_id: int):
        return ok(salaries.get_salary(actor=actor, salary_id=salary_id).to_dict())

    @app.route("/api/salary/<int:salary_id>/status", methods=["PUT"], endpoint="salary_status")
    @login_required
    def update_status(actor, salary_id: int):
        data = json_body()
        salary = salaries.update_payment_status(
            actor=actor,
            salary_id=salary_id,
            status=data.get("paymentStatus"),
            payment_date=data.get("paymentDate"),
            payment_mode=data.get("paymentMode"),
            transaction_id=data.get("transactionId"),
            remarks=data.get("remarks"),
        )
        return ok(salary.to_dict(), message="Salary status updated successfully")

    # incentives / deductions

    @app.route("/api/salary/incentive", methods=["POST"], endpoint="incentive_add")
    @login_required
    def add_incentive(actor):
        incentive = adjustments.add_incentive(actor=actor, data=json_body())
        return ok(incentive.to_dict(), message="Incentive added successfully", status=201)

    @app.route("/api/salary/incentives", methods=["GET"], endpoint="incentive_list")
    @login_required
    def list_incentives(actor):
        items = adjustments.list_incentives(
            actor=actor,
            employee_id=request.args.get("employee"),
            month=request.args.get("month"),
            year=request.args.get("year"),
            status=request.args.get("status"),
        )
        return ok([i.to_dict() for i in items])

    @app.route("/api/salary/incentive/<int:incentive_id>/<any(approve, reject):decision>", methods=["PUT"], endpoint="incentive_decide")
    @login_required
    def decide_incentive(actor, incentive_id: int, decision: str):
        action = adjustments.approve_incentive if decision == "approve" else adjustments.reject_incentive
        return ok(action(actor=actor, incentive_id=incentive_id).to_dict())

    @app.route("/api/salary/deduction", methods=["POST"], endpoint="deduction_add")
    @login_required
    def add_deduction(actor):
        deduction = adjustments.add_deduction(actor=actor, data=json_body())
        return ok(deduction.to_dict(), message="Deduction added successfully", status=201)

    @app.route("/api/salary/deductions", methods=["GET"], endpoint="deduction_list")
    @login_required
    def list_deductions(actor):
        items = adjustments.list_deductions(
            actor=actor,
            employee_id=request.args.get("employee"),
            month=request.args.get("month"),
            year=request.args.get("year"),
            status=request.args.get("status"),
        )
        return ok([d.to_dict() for d in items])

    @app.route("/api/salary/deduction/<int:deduction_id>/<any(approve, reject):decision>", methods=["PUT"], endpoint="deduction_decide")
    @login_required
    def decide_deduction(actor, deduction_id: int, decision: str):
        action = adjustments.approve_deduction if decision == "approve" else adjustments.reject_deduction
        return ok(action(actor=actor, deduction_id=deduction_id).to_dict())

    # advances

    @app.route("/api/salary/advance", methods=["POST"], endpoint="advance_add")
    @login_required
    def add_advance(actor):
        advance = advances.create_advance(actor=actor, data=json_body())
        return ok(advance.to_dict(), message="Advance added successfully", status=201)

    @app.route("/api/salary/advance/request", methods=["POST"], endpoint="advance_request")
    @login_required
    def request_advance(actor):
        advance = advances.request_advance(actor=actor, data=json_body())
        return ok(advance.to_dict(), message="Advance requested successfully", status=201)

    @app.route("/api/salary/advances", methods=["GET"], endpoint="advance_list")
    @login_required
    def list_advances(actor):
        items = advances.list_advances(
            actor=actor,
            employee_id=request.args.get("employee"),
            approval_status=request.args.get("status"),
            repayment_status=request.args.get("repaymentStatus"),
        )
        return ok([a.to_dict() for a in items])

    @app.route("/api/salary/advance/<int:advance_id>", methods=["GET"], endpoint="advance_get")
    @login_required
    def get_advance(actor, advance_id: int):
        return ok(advances.get_advance(actor=actor, advance_id=advance_id).to_dict())

    @app.route("/api/salary/advance/<int:advance_id>/<any(approve, reject):decision>", methods=["PUT"], endpoint="advance_decide")
    @login_required
    def decide_advance(actor, advance_id: int, decision: str):
        action = advances.approve_advance if decision == "approve" else advances.reject_advance
        return ok(action(actor=actor, advance_id=advance_id, remarks=json_body().get("remarks")).to_dict())

    @app.route("/api/salary/advance/<int:advance_id>/repayment", methods=["POST"], endpoint="advance_repayment")
    @login_required
    def record_repayment(actor, advance_id: int):
        data = json_body()
        advance = advances.record_repayment(
            actor=actor,
            advance_id=advance_id,
            month=data.get("month"),
            year=data.get("year"),
            amount=data.get("amount"),
        )
        return ok(advance.to_dict(), message="Repayment recorded successfully")

    # increments

    @app.route("/api/salary/increment", methods=["POST"], endpoint="increment_add")
    @login_required
    def add_increment(actor):
        data = json_body()
        increment = increments.apply_increment(
            actor=actor,
            employee_id=data.get("employee"),
            effective_date=data.get("effectiveDate", ""),
            new_salary=data.get("newSalary"),
            reason=data.get("reason"),
            remarks=data.get("remarks"),
        )
        return ok(increment.to_dict(), message="Increment added successfully", status=201)

    @app.route("/api/salary/increments", methods=["GET"], endpoint="increment_list")
    @login_required
    def list_increments(actor):
        items = increments.list_increments(
            actor=actor,
            employee_id=request.args.get("employee"),
            year=request.args.get("year"),
        )
        return ok([i.to_dict() for i in items])
