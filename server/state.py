"""Request-scoped access to the objects the app was built with."""

from fastapi import Request

from opsgraph.service import OpsGraphService


def get_service(request: Request) -> OpsGraphService:
    return request.app.state.service


def get_audit_sink(request: Request):
    return request.app.state.audit_sink
