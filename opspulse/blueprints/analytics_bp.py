"""
Analytics blueprint — read-only dashboard metrics and risk findings.

Endpoints (all GET, ``tenant_id`` query param required):
    /api/v1/analytics/velocity              14-day completed-effort series + trend
    /api/v1/analytics/engagement            5 team engagement dimensions
    /api/v1/analytics/engagement/members    per-member engagement breakdown
    /api/v1/analytics/capacity              14-day capacity forecast (?horizon_days=)
    /api/v1/analytics/blockers              blocker clusters by unit
    /api/v1/analytics/sentinel              risk findings (?snapshot=true for one consistent read)
    /api/v1/analytics/leave                 leave analysis (?start=&end=&member_id=&unit_id=)
    /api/v1/analytics/rules                 thresholds + sentinel rule catalog

Each widget calls its endpoint independently, so one failing metric
degrades only its own card. Service layer owns all computation.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request

from opspulse.core.exceptions import AggregationError, ConfigurationError, GatewayError
from opspulse.services import (
    AnalyticsRules,
    AnalyticsSnapshot,
    compute_blockers,
    compute_capacity,
    compute_engagement,
    compute_leave_analysis,
    compute_member_engagement,
    compute_sentinel,
    compute_velocity,
)
from opspulse.utils.errors import E, api_error
from opspulse.utils.helpers import parse_bool, parse_date_input

logger = logging.getLogger(__name__)

analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/v1/analytics")


# ── Request helpers ──────────────────────────────────────────────────────────


def _tenant_id():
    """Raw tenant_id query value; validated by the service layer."""
    return request.args.get("tenant_id")


def _optional_int(name: str) -> int | None:
    raw = request.args.get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer", details={name: raw}) from exc


def _int_list(name: str) -> list[int]:
    values = []
    for raw in request.args.getlist(name):
        try:
            values.append(int(raw))
        except ValueError as exc:
            raise ConfigurationError(f"{name} must be an integer", details={name: raw}) from exc
    return values


def _date_arg(name: str):
    try:
        return parse_date_input(request.args.get(name))
    except ValueError as exc:
        raise ConfigurationError(str(exc), details={name: request.args.get(name)}) from exc


# ── Error handlers ───────────────────────────────────────────────────────────


@analytics_bp.errorhandler(ConfigurationError)
def _handle_configuration(error: ConfigurationError):
    code = E.VALIDATION_REQUIRED if error.missing else E.VALIDATION_INVALID
    return api_error(code, str(error), details=error.details)


@analytics_bp.errorhandler(GatewayError)
def _handle_gateway(error: GatewayError):
    # Already logged by the gateway; the cause is not echoed to clients
    return api_error(E.GATEWAY_UNAVAILABLE, "Record store unavailable",
                     details={"operation": error.operation})


@analytics_bp.errorhandler(AggregationError)
def _handle_aggregation(error: AggregationError):
    logger.error("Aggregation failed endpoint=%s: %s", request.endpoint, error)
    return api_error(E.AGGREGATION, str(error))


@analytics_bp.errorhandler(Exception)
def _handle_unexpected(error: Exception):
    logger.exception("Unexpected error in analytics_bp endpoint=%s", request.endpoint)
    return api_error(E.INTERNAL, "Internal server error")


# ═════════════════════════════════════════════════════════════════════════
# Calculators
# ═════════════════════════════════════════════════════════════════════════


@analytics_bp.route("/velocity", methods=["GET"])
def velocity():
    return jsonify(compute_velocity(_tenant_id())), 200


@analytics_bp.route("/engagement", methods=["GET"])
def engagement():
    return jsonify(compute_engagement(_tenant_id())), 200


@analytics_bp.route("/engagement/members", methods=["GET"])
def engagement_members():
    return jsonify(compute_member_engagement(_tenant_id())), 200


@analytics_bp.route("/capacity", methods=["GET"])
def capacity():
    horizon = _optional_int("horizon_days")
    return jsonify(compute_capacity(_tenant_id(), horizon_days=horizon)), 200


@analytics_bp.route("/blockers", methods=["GET"])
def blockers():
    return jsonify(compute_blockers(_tenant_id())), 200


@analytics_bp.route("/leave", methods=["GET"])
def leave():
    """Leave analysis.

    Query params: tenant_id (required), start, end (ISO dates),
    member_id / unit_id (repeatable).
    """
    report = compute_leave_analysis(
        _tenant_id(),
        start=_date_arg("start"),
        end=_date_arg("end"),
        member_ids=_int_list("member_id"),
        unit_ids=_int_list("unit_id"),
    )
    return jsonify(report), 200


# ═════════════════════════════════════════════════════════════════════════
# Sentinel
# ═════════════════════════════════════════════════════════════════════════


@analytics_bp.route("/sentinel", methods=["GET"])
def sentinel():
    """Risk findings.

    ``?snapshot=true`` captures one AnalyticsSnapshot and evaluates every
    rule against it; otherwise each calculator reads the store on its own.
    """
    tenant_id = _tenant_id()
    shared = parse_bool(request.args.get("snapshot"))
    snap = AnalyticsSnapshot.capture(tenant_id) if shared else None
    findings = compute_sentinel(tenant_id, snapshot=snap)
    return jsonify({
        "tenant_id": snap.tenant_id if snap else int(tenant_id),
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "mode": "snapshot" if shared else "independent",
        "findings": findings,
    }), 200


@analytics_bp.route("/rules", methods=["GET"])
def rules():
    return jsonify({
        "thresholds": AnalyticsRules.get_all_thresholds(),
        "sentinel_rules": AnalyticsRules.rule_catalog(),
    }), 200
