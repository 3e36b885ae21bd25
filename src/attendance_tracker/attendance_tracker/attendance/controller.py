from __future__ import annotations

from flask import Flask, g

from ..container import Container
from ..core.enums import Role
from ..web.responses import success
from ..web.security import roles_required


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "")
    member_required = roles_required(container, Role.EMPLOYEE, Role.ADMIN)
    admin_required = roles_required(container, Role.ADMIN)

    @app.route(f"{prefix}/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @member_required
    def check_in():
        record = container.attendance_service.check_in(g.principal.username)
        return success(record.to_dict(), 201)

    @app.route(f"{prefix}/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @member_required
    def check_out():
        record = container.attendance_service.check_out(g.principal.username)
        return success(record.to_dict())

    @app.route(f"{prefix}/attendance/my-records", methods=["GET"], endpoint="attendance_my_records")
    @member_required
    def my_records():
        records = container.attendance_service.get_my_records(g.principal.username)
        return success([r.to_dict() for r in records])

    @app.route(f"{prefix}/attendance/my-summary", methods=["GET"], endpoint="attendance_my_summary")
    @member_required
    def my_summary():
        summary = container.attendance_service.get_my_summary(g.principal.username)
        return success(summary.to_dict())

    @app.route(f"{prefix}/admin/attendance/all", methods=["GET"], endpoint="admin_attendance_all")
    @admin_required
    def admin_all():
        records = container.attendance_service.get_all_records()
        return success([r.to_dict() for r in records])

    @app.route(f"{prefix}/admin/attendance/<int:user_id>", methods=["GET"], endpoint="admin_attendance_by_user")
    @admin_required
    def admin_by_user(user_id: int):
        records = container.attendance_service.get_records_by_user_id(user_id)
        return success([r.to_dict() for r in records])
