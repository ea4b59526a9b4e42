"""Conversion of issue-tracker payloads into scoreable documents."""

from __future__ import annotations

from typing import Any

from issue_similarity.errors import InputError
from issue_similarity.types import IssueDocument, IssueMetadata

_INLINE_CONTAINERS = {"paragraph", "heading"}


def issue_from_tracker_payload(payload: dict[str, Any]) -> IssueDocument:
    """Build an `IssueDocument` from a tracker issue JSON object.

    Expects ``key`` plus ``fields.summary``, ``fields.description`` (rich-text
    document or plain string), ``fields.issuetype.id``, ``fields.labels`` and
    ``fields.components[].name``. Everything except ``key`` is optional, but a
    field that is present with the wrong JSON type raises `InputError`.
    """

    if not isinstance(payload, dict):
        raise InputError("Issue payload must be an object")
    key = payload.get("key")
    if not key:
        raise InputError("Issue payload has no key")

    fields = _expect(payload.get("fields"), dict, key, "fields") or {}
    issue_type = _expect(fields.get("issuetype"), dict, key, "issuetype") or {}
    labels = _expect(fields.get("labels"), list, key, "labels") or []
    components = _expect(fields.get("components"), list, key, "components") or []
    return IssueDocument(
        doc_id=str(key),
        summary_text=str(fields.get("summary") or ""),
        description_text=description_text(fields.get("description")),
        metadata=IssueMetadata(
            issue_type_id=str(issue_type["id"]) if issue_type.get("id") is not None else None,
            labels=frozenset(str(label) for label in labels),
            components=frozenset(
                str(component["name"])
                for component in components
                if isinstance(component, dict) and component.get("name")
            ),
        ),
    )


def _expect(value: Any, kind: type, key: Any, name: str) -> Any:
    if value is not None and not isinstance(value, kind):
        raise InputError(
            f"Issue {key}: '{name}' should be {kind.__name__}, got {type(value).__name__}"
        )
    return value


def description_text(description: Any) -> str:
    """Flatten a rich-text description into plain text, one line per block."""
    if description is None:
        return ""
    if isinstance(description, str):
        return description
    if isinstance(description, dict):
        return _node_text(description).strip()
    return ""


def _node_text(node: dict[str, Any]) -> str:
    node_type = node.get("type")
    if node_type == "text":
        return str(node.get("text", ""))
    if node_type == "hardBreak":
        return "\n"
    if node_type == "mention":
        return str((node.get("attrs") or {}).get("text", ""))

    children = [child for child in node.get("content") or [] if isinstance(child, dict)]
    parts = [_node_text(child) for child in children]
    if node_type in _INLINE_CONTAINERS:
        return "".join(parts)
    return "\n".join(part for part in parts if part)
