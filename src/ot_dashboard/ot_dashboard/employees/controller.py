from __future__ import annotations

from flask import Flask

from ..common.http import current_user, login_required, ok, request_data
from ..container import Container
from .model import Employee


def _employee_json(e: Employee) -> dict:
    return {"_id": e.record_id, **e.to_payload()}


def register(app: Flask, container: Container) -> None:
    employees = container.employee_service

    @app.route("/employees", methods=["GET"], endpoint="list_employees")
    @login_required(container)
    def list_employees():
        return ok([_employee_json(e) for e in employees.list_employees()])

    @app.route("/employees/<record_id>", methods=["GET"], endpoint="get_employee")
    @login_required(container)
    def get_employee(record_id: str):
        return ok(_employee_json(employees.get(record_id)))

    @app.route("/employees", methods=["POST"], endpoint="add_employee")
    @login_required(container)
    def add_employee():
        data = request_data()
        employees.add(
            current_user=current_user(container),
            employee_number=data.get("employeeNumber", ""),
            name=data.get("name", ""),
            phone=data.get("phone", ""),
        )
        return ok(message="Employee added", status=201)

    @app.route("/employees/<record_id>", methods=["PUT"], endpoint="update_employee")
    @login_required(container)
    def update_employee(record_id: str):
        data = request_data()
        employees.update(
            current_user=current_user(container),
            record_id=record_id,
            employee_number=data.get("employeeNumber", ""),
            name=data.get("name", ""),
            phone=data.get("phone", ""),
        )
        return ok(message="Employee updated")

    @app.route("/employees/<record_id>", methods=["DELETE"], endpoint="delete_employee")
    @login_required(container)
    def delete_employee(record_id: str):
        employees.delete(current_user=current_user(container), record_id=record_id)
        return ok(message="Employee deleted")
