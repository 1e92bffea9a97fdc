"""Adapters that carry gate decisions out of opsgraph."""

from opsgraph.adapters.sinks import AuditSink, FileAuditSink, ListAuditSink, record_audit

__all__ = ["AuditSink", "FileAuditSink", "ListAuditSink", "record_audit"]
