"""
Response formatter: makes query results safe for JSON and for printing.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId


def clean_documents(results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Sanitise every document in *results* (``_id`` is kept, as a string)."""
    return [_sanitise_value(doc) for doc in results]


def clean_document(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    return None if doc is None else _sanitise_value(doc)


def _sanitise_value(obj: Any) -> Any:
    """Recursively convert non-JSON-safe types to safe representations."""
    if isinstance(obj, dict):
        return {k: _sanitise_value(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitise_value(item) for item in obj]
    if isinstance(obj, ObjectId):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (int, float, str, bool, type(None))):
        return obj
    # Decimal128, Int64, Timestamp, etc.
    return str(obj)


def summarise_explain(explain: Dict[str, Any]) -> Dict[str, Any]:
    """Pick the parts of an explain document worth showing a human."""
    planner = explain.get("queryPlanner", {})
    stats = explain.get("executionStats", {})
    winning = planner.get("winningPlan", {})
    return {
        "namespace": planner.get("namespace"),
        "winning_stage": _innermost_stage(winning),
        "index_name": _find_index_name(winning),
        "n_returned": stats.get("nReturned"),
        "execution_time_ms": stats.get("executionTimeMillis"),
        "total_keys_examined": stats.get("totalKeysExamined"),
        "total_docs_examined": stats.get("totalDocsExamined"),
    }


def _innermost_stage(plan: Dict[str, Any]) -> Optional[str]:
    # Newer servers wrap the classic plan in "queryPlan".
    plan = plan.get("queryPlan", plan)
    while "inputStage" in plan:
        plan = plan["inputStage"]
    return plan.get("stage")


def _find_index_name(plan: Dict[str, Any]) -> Optional[str]:
    plan = plan.get("queryPlan", plan)
    while plan:
        if "indexName" in plan:
            return plan["indexName"]
        plan = plan.get("inputStage")
    return None
