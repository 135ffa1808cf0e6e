from __future__ import annotations

from collections import Counter
from typing import Any


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    requests = [e for e in events if e["type"] == "smart_dish"]
    total = len(requests)

    # Result quality
    status_counter: Counter[str] = Counter(r.get("status", "unknown") for r in requests)
    degraded = status_counter["fallback"] + status_counter["error"]

    # Average response time
    times = [r["response_time_ms"] for r in requests if "response_time_ms" in r]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Top occasions
    occasion_counter: Counter[str] = Counter(r.get("occasion", "unknown") for r in requests)
    top_occasions = [{"name": n, "count": c} for n, c in occasion_counter.most_common()]

    # Top served categories
    category_counter: Counter[str] = Counter()
    for r in requests:
        for c in r.get("categories", []) or []:
            category_counter[c or "Unknown"] += 1
    top_categories = [{"name": n, "count": c} for n, c in category_counter.most_common(10)]

    failed_fetches = sum(r.get("failed_fetches", 0) for r in requests)

    return {
        "total_requests": total,
        "status_breakdown": dict(status_counter),
        "fallback_rate": round(degraded / total * 100, 1) if total else 0.0,
        "avg_response_time_ms": avg_time,
        "top_occasions": top_occasions,
        "top_categories": top_categories,
        "failed_fetches": failed_fetches,
    }
