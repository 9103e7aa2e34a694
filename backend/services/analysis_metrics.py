"""
Heuristics applied to per-file migration analyses

The external service returns loosely structured JSON; everything here turns
that payload into the stored Analysis shape and derives the numeric scores.
"""
import time
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

SEVERITIES = ("info", "warning", "critical")


class ProcessingTimer:
    """Tracks processing time for migration operations"""

    def __init__(self):
        self._start = time.monotonic()

    def elapsed_ms(self) -> int:
        """Elapsed time in milliseconds"""
        return int((time.monotonic() - self._start) * 1000)


def _count_severity(key_changes: List[Dict[str, Any]], severity: str) -> int:
    return sum(
        1 for change in key_changes
        if isinstance(change, dict) and change.get("severity") == severity
    )


def calculate_compatibility_score(key_changes: Optional[List[Dict[str, Any]]]) -> int:
    """
    Calculate a 0-100 compatibility score from key changes

    Starts at 100, minus 15 per critical change and 5 per warning.
    """
    if not isinstance(key_changes, list) or not key_changes:
        return 100

    score = 100
    score -= _count_severity(key_changes, "critical") * 15
    score -= _count_severity(key_changes, "warning") * 5
    return max(0, score)


def determine_migration_complexity(source_code: str, key_changes: Optional[List[Dict[str, Any]]]) -> str:
    """
    Rate migration complexity as 'low', 'medium' or 'high'

    Args:
        source_code: Original source text
        key_changes: Key change records

    Returns:
        Complexity level
    """
    complexity_score = 0

    code_length = len(source_code or "")
    if code_length > 10000:
        complexity_score += 30
    elif code_length > 3000:
        complexity_score += 15
    elif code_length > 1000:
        complexity_score += 5

    if isinstance(key_changes, list):
        complexity_score += _count_severity(key_changes, "critical") * 10
        complexity_score += _count_severity(key_changes, "warning") * 5

    if complexity_score >= 40:
        return "high"
    if complexity_score >= 15:
        return "medium"
    return "low"


def _clamp_score(value: Any) -> Optional[float]:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    return max(0.0, min(100.0, score))


def _normalize_key_change(item: Any) -> Optional[Dict[str, Any]]:
    if isinstance(item, str):
        return {"category": "general", "description": item, "severity": None}
    if not isinstance(item, dict):
        return None

    severity = str(item.get("severity") or "").lower() or None
    if severity not in SEVERITIES:
        severity = None

    return {
        # Older prompts used "type" for the category
        "category": str(item.get("category") or item.get("type") or "general"),
        "description": str(item.get("description") or item.get("title") or ""),
        "severity": severity,
    }


def _normalize_scored_mapping(raw: Any, label_key: str, detail_key: str) -> Dict[str, Dict[str, Any]]:
    """Turn {name: score} / {name: {...}} / [{...}] into {name: {label, score, detail}}"""
    if isinstance(raw, list):
        raw = {
            str(entry.get(label_key) or entry.get("name") or f"item_{index}"): entry
            for index, entry in enumerate(raw) if isinstance(entry, dict)
        }
    if not isinstance(raw, dict):
        return {}

    normalized = {}
    for name, value in raw.items():
        if isinstance(value, dict):
            score = _clamp_score(value.get("score", value.get("rating")))
            detail = value.get(detail_key) or value.get("description") or value.get("details")
        else:
            score = _clamp_score(value)
            detail = None
        if score is None:
            logger.debug(f"Dropping '{name}': no numeric score")
            continue
        normalized[str(name)] = {label_key: str(name), "score": score, detail_key: detail}
    return normalized


def _normalize_string_list(raw: Any) -> List[str]:
    if isinstance(raw, str):
        return [raw] if raw.strip() else []
    if not isinstance(raw, list):
        return []
    items = []
    for entry in raw:
        if isinstance(entry, str):
            items.append(entry)
        elif isinstance(entry, dict):
            text = entry.get("description") or entry.get("title") or entry.get("issue")
            if text:
                items.append(str(text))
    return items


def normalize_analysis_payload(payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Coerce an external per-file analysis payload into the Analysis shape

    Unknown keys are dropped; missing sections become empty values.
    """
    payload = payload if isinstance(payload, dict) else {}

    raw_changes = payload.get("key_changes", payload.get("keyChanges", []))
    if not isinstance(raw_changes, list):
        raw_changes = []
    key_changes = [c for c in (_normalize_key_change(item) for item in raw_changes) if c]

    generated_tests = payload.get("generated_tests", payload.get("generatedTests", ""))
    if not isinstance(generated_tests, str):
        generated_tests = ""

    return {
        "key_changes": key_changes,
        "performance_metrics": _normalize_scored_mapping(
            payload.get("performance_metrics", payload.get("performanceMetrics")),
            "name", "description",
        ),
        "business_logic_preservation": _normalize_scored_mapping(
            payload.get("business_logic_preservation", payload.get("businessLogicPreservation")),
            "category", "details",
        ),
        "generated_tests": generated_tests,
        "security_issues": _normalize_string_list(
            payload.get("security_issues", payload.get("securityIssues"))
        ),
        "optimization_suggestions": _normalize_string_list(
            payload.get("optimization_suggestions", payload.get("optimizationSuggestions"))
        ),
    }
