"""
Qdrant filter construction

The collection is shared by every tenant and isolated only by payload
filters, so every filter used by the gateway and the RAG pipeline is
built here. A scope that resolves to nothing is rejected rather than
turned into an unfiltered query.
"""

from typing import Iterable, Optional, Union
from uuid import UUID

from qdrant_client.models import FieldCondition, Filter, MatchAny, MatchValue

from botdesk.core.exceptions import BadRequestError

Scope = Union[str, UUID, Iterable[Union[str, UUID]]]


def _normalize(scope: Scope, field: str):
    """Return a single id or a de-duplicated, order-preserving id list"""
    if scope is None:
        raise BadRequestError(f"A {field} scope is required")

    if isinstance(scope, (str, UUID)):
        value = str(scope)
        if not value:
            raise BadRequestError(f"A {field} scope is required")
        return value

    values = list(dict.fromkeys(str(item) for item in scope if item is not None and str(item)))
    if not values:
        raise BadRequestError(f"A {field} scope must contain at least one id")
    return values


def match_condition(field: str, scope: Scope) -> FieldCondition:
    """Exact match for one id, `any` match for a set of ids"""
    value = _normalize(scope, field)
    if isinstance(value, str):
        return FieldCondition(key=field, match=MatchValue(value=value))
    return FieldCondition(key=field, match=MatchAny(any=value))


def build_document_filter(scope: Scope, user_id: Optional[Union[str, UUID]] = None) -> Filter:
    """
    Filter points to a document scope

    Args:
        scope: One document id or a collection of document ids
        user_id: Optionally also require the owning user

    Returns:
        Qdrant Filter

    Raises:
        BadRequestError: If the scope is empty
    """
    conditions = [match_condition("document_id", scope)]
    if user_id is not None:
        conditions.append(match_condition("user_id", user_id))
    return Filter(must=conditions)


def build_chunk_filter(
    chunk_ids: Iterable[Union[str, UUID]],
    document_scope: Optional[Scope] = None
) -> Filter:
    """
    Filter points to a set of chunk ids

    With a document scope, a chunk id only resolves inside those
    documents, never in another tenant's.
    """
    conditions = [match_condition("chunk_id", chunk_ids)]
    if document_scope is not None:
        conditions.append(match_condition("document_id", document_scope))
    return Filter(must=conditions)
