"""
Field normalizer for form-provider webhook payloads.

Every answered question arrives as a RawField whose ``value`` can be a plain
scalar, an option reference, an uploaded-file object, or a list of any of
those. Values are first classified into an explicit variant and then resolved
to a single human-readable string, so the rest of the intake pipeline only
ever deals with ``label -> Optional[str]``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from src.intake.contracts import FieldOption, RawField

AnswerMap = Dict[str, Optional[str]]

LIST_SEPARATOR = ", "


@dataclass(frozen=True)
class Missing:
    pass


@dataclass(frozen=True)
class Scalar:
    value: Union[str, int, float, bool]


@dataclass(frozen=True)
class Reference:
    """An object answer: uploaded file, option payload, or anything with an id."""

    payload: Mapping[str, Any]


@dataclass(frozen=True)
class ScalarList:
    items: List[Scalar]


@dataclass(frozen=True)
class ReferenceList:
    """A list holding at least one object; remaining items may be scalars."""

    items: List[Union[Scalar, Reference]]


FieldValue = Union[Missing, Scalar, Reference, ScalarList, ReferenceList]


def classify_value(value: Any) -> FieldValue:
    if value is None:
        return Missing()
    if isinstance(value, (list, tuple)):
        items = [_classify_item(v) for v in value]
        if any(isinstance(item, Reference) for item in items):
            return ReferenceList(items=items)
        return ScalarList(items=items)
    if isinstance(value, Mapping):
        return Reference(payload=value)
    return Scalar(value=value)


def _classify_item(value: Any) -> Union[Scalar, Reference]:
    if isinstance(value, Mapping):
        return Reference(payload=value)
    return Scalar(value=value)


def _option_text(options: Iterable[FieldOption], option_id: str) -> Optional[str]:
    for opt in options:
        if opt.id == option_id:
            return opt.text
    return None


def _scalar_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _resolve_scalar(scalar: Scalar, options: List[FieldOption]) -> str:
    if isinstance(scalar.value, str):
        match = _option_text(options, scalar.value)
        return match if match is not None else scalar.value
    return _scalar_text(scalar.value)


def _resolve_list_reference(ref: Reference) -> str:
    payload = ref.payload
    if payload.get("url"):
        return str(payload["url"])
    if payload.get("text"):
        return str(payload["text"])
    return json.dumps(dict(payload), separators=(",", ":"), ensure_ascii=False)


def _resolve_reference(ref: Reference, options: List[FieldOption]) -> Optional[str]:
    payload = ref.payload
    if payload.get("url"):
        return str(payload["url"])
    if payload.get("text"):
        return str(payload["text"])
    ref_id = payload.get("id")
    if ref_id:
        match = _option_text(options, str(ref_id))
        return match if match is not None else str(ref_id)
    return None


def normalize_field(field: Optional[RawField]) -> Optional[str]:
    """Resolve one RawField to a readable string, or None when unanswered."""
    if field is None:
        return None

    value = classify_value(field.value)
    if isinstance(value, Missing):
        return None
    if isinstance(value, Scalar):
        return _resolve_scalar(value, field.options)
    if isinstance(value, Reference):
        return _resolve_reference(value, field.options)

    resolved: List[str] = []
    for item in value.items:
        if isinstance(item, Reference):
            resolved.append(_resolve_list_reference(item))
        else:
            resolved.append(_resolve_scalar(item, field.options))
    return LIST_SEPARATOR.join(resolved)


def parse_answers(fields: Iterable[Union[RawField, Mapping[str, Any]]]) -> AnswerMap:
    """
    Build the AnswerMap for one submission, keyed by label (falling back to id).

    A later field carrying an already-seen key replaces the earlier answer.
    """
    answers: AnswerMap = {}
    for raw in fields or []:
        field = raw if isinstance(raw, RawField) else RawField.model_validate(raw)
        key = field.label or field.id
        if not key:
            continue
        answers[key] = normalize_field(field)
    return answers
