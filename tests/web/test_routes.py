from __future__ import annotations

import pytest
from werkzeug.security import generate_password_hash

from hr_payroll.core.enums import Role
from hr_payroll.main import create_app
from tests.fakes import ADMIN, HR_DEFAULT, make_employee


@pytest.fixture
def app(monkeypatch, backend):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=backend.container())
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def _sign_in(client, actor=ADMIN):
    with client.session_transaction() as sess:
        sess["actor"] = actor.to_session()


def test_login_sets_session(backend, client):
    emp = backend.employees.add(make_employee())
    backend.users.create_user(
        email=emp.email,
        employee_code=emp.employee_code,
        employee_id=emp.id,
        password_hash=generate_password_hash("secret123"),
        role=Role.EMPLOYEE,
        permissions=frozenset(),
    )

    resp = client.post("/api/auth/login", json={"email": "ravi@example.com", "password": "secret123"})

    assert resp.status_code == 200
    assert resp.get_json()["data"]["role"] == "employee"
    assert client.get("/api/auth/me").status_code == 200


def test_bad_login_is_401(client):
    resp = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "x"})
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_protected_route_needs_session(client):
    resp = client.get("/api/employees")
    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "message": "Not authorized, please log in"}


def test_missing_employee_is_404(client):
    _sign_in(client)
    resp = client.get("/api/employees/999")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_generate_then_duplicate(backend, client):
    emp = backend.employees.add(make_employee())
    _sign_in(client)
    payload = {"employeeId": emp.id, "month": 3, "year": 2024}

    created = client.post("/api/salary/generate", json=payload)
    assert created.status_code == 201
    body = created.get_json()
    assert body["success"] is True
    assert body["data"]["paymentStatus"] == "Pending"

    again = client.post("/api/salary/generate", json=payload)
    assert again.status_code == 400
    assert again.get_json()["code"] == "DUPLICATE_SALARY"


def test_incomplete_profile_lists_missing_fields(backend, client):
    emp = backend.employees.add(make_employee(pan_number=None))
    _sign_in(client)

    resp = client.post("/api/salary/generate", json={"employeeId": emp.id, "month": 3, "year": 2024})

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["code"] == "INCOMPLETE_PROFILE"
    assert body["missingFields"] == ["PAN Number"]


def test_hr_without_salary_permission_is_forbidden(backend, client):
    emp = backend.employees.add(make_employee())
    _sign_in(client, HR_DEFAULT)
    resp = client.post("/api/salary/generate", json={"employeeId": emp.id, "month": 3, "year": 2024})
    assert resp.status_code == 403


def test_salary_register_csv_export(backend, client):
    emp = backend.employees.add(make_employee())
    _sign_in(client)
    client.post("/api/salary/generate", json={"employeeId": emp.id, "month": 3, "year": 2024})

    resp = client.get("/api/reports/salary?month=3&year=2024&format=csv")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "salary_register_2024_03.csv" in resp.headers["Content-Disposition"]
    lines = resp.data.decode("utf-8-sig").splitlines()
    assert lines[0].startswith("employeeId,name,department")
    assert lines[1].startswith("NM000001001,Ravi Kumar,Bodyshop")


def test_salary_report_json(backend, client):
    _sign_in(client)
    resp = client.get("/api/reports/salary?month=3&year=2024")
    body = resp.get_json()
    assert body["data"]["count"] == 0
    assert body["data"]["totals"]["totalNetSalary"] == 0.0
