"""Per-tool pricing and usage aggregation over usage_logs."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from ..auth.api_keys import ApiKeyRepository
from ..database import get_db_connection

# Cost per successful call, in cents
TOOL_PRICING = {
    "ingest_design": 10,
    "search_design_patterns": 2,
    "search_patterns": 2,
    "generate_font": 5,
    "pair_typography": 5,
    "convert_design_to_code": 25,
    "convert_design": 25,
}


def _month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _fetch_logs(
    key_ids: list[str],
    since: str,
    status: Optional[str] = None,
    tool: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> list[dict]:
    placeholders = ",".join("?" for _ in key_ids)
    query = f"""
        SELECT tool_name, status, latency_ms, created_at FROM usage_logs
        WHERE api_key_id IN ({placeholders}) AND created_at >= ?
    """
    params: list = [*key_ids, since]
    if status:
        query += " AND status = ?"
        params.append(status)
    if tool:
        query += " AND tool_name = ?"
        params.append(tool)
    query += " ORDER BY created_at ASC"

    with get_db_connection(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(query, params)
        return [dict(row) for row in cursor.fetchall()]


def get_usage_summary(user_id: str, db_path: Optional[Path] = None) -> dict:
    """Month-to-date billable usage for a user.

    Only successful calls are counted and priced.

    Returns:
        Dictionary with totalCalls, totalCostCents, breakdown
        ({tool: {calls, costCents}}), periodStart and periodEnd
    """
    now = datetime.now(timezone.utc)
    period_start = _month_start(now)
    summary = {
        "totalCalls": 0,
        "totalCostCents": 0,
        "breakdown": {},
        "periodStart": period_start.isoformat(),
        "periodEnd": now.isoformat(),
    }

    key_ids = ApiKeyRepository(db_path).list_ids(user_id)
    if not key_ids:
        return summary

    logs = _fetch_logs(key_ids, period_start.isoformat(), status="success", db_path=db_path)
    for log in logs:
        cost = TOOL_PRICING.get(log["tool_name"], 0)
        entry = summary["breakdown"].setdefault(log["tool_name"], {"calls": 0, "costCents": 0})
        entry["calls"] += 1
        entry["costCents"] += cost
        summary["totalCalls"] += 1
        summary["totalCostCents"] += cost

    return summary


def get_usage_report(
    user_id: str,
    days: int = 30,
    tool: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> dict:
    """Daily call counts and per-tool statistics for the last `days` days.

    Every call counts towards calls, latency and error rate; only
    successful calls are priced.
    """
    report = {
        "dailyCalls": [],
        "toolBreakdown": [],
        "totalCalls": 0,
        "totalCostCents": 0,
    }

    key_ids = ApiKeyRepository(db_path).list_ids(user_id)
    if not key_ids:
        return report

    since = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()
    logs = _fetch_logs(key_ids, since, tool=tool, db_path=db_path)

    daily: dict[str, int] = {}
    tools: dict[str, dict] = {}
    for log in logs:
        day = log["created_at"][:10]
        daily[day] = daily.get(day, 0) + 1

        stats = tools.setdefault(
            log["tool_name"], {"calls": 0, "errors": 0, "total_latency": 0, "cost_cents": 0}
        )
        stats["calls"] += 1
        stats["total_latency"] += log["latency_ms"] or 0
        if log["status"] == "error":
            stats["errors"] += 1
        if log["status"] == "success":
            stats["cost_cents"] += TOOL_PRICING.get(log["tool_name"], 0)

    report["dailyCalls"] = [{"date": day, "count": count} for day, count in daily.items()]
    report["toolBreakdown"] = [
        {
            "tool": name,
            "calls": stats["calls"],
            "avgLatency": round(stats["total_latency"] / stats["calls"]),
            "errorRate": round(stats["errors"] / stats["calls"] * 100, 1),
            "costCents": stats["cost_cents"],
        }
        for name, stats in tools.items()
    ]
    report["totalCalls"] = len(logs)
    report["totalCostCents"] = sum(t["costCents"] for t in report["toolBreakdown"])
    return report
