from __future__ import annotations

from flask import Flask

from ..container import Container
from ..web.payload import json_object
from ..web.responses import success


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "")

    @app.route(f"{prefix}/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = json_object()
        result = container.auth_service.register(
            username=data.get("username"),
            password=data.get("password"),
            full_name=data.get("fullName"),
        )
        return success(result.to_dict(), 201)

    @app.route(f"{prefix}/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_object()
        result = container.auth_service.login(
            username=data.get("username"),
            password=data.get("password"),
        )
        return success(result.to_dict())
