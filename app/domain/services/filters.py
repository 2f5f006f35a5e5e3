from app.domain.errors import ValidationError
from app.domain.models.query import QueryFilter, QueryOptions

SUBDOMAIN_FIELD = "subdomain"

_COMPARISON_OPS = {
    "!=": "$ne",
    "<": "$lt",
    "<=": "$lte",
    ">": "$gt",
    ">=": "$gte",
}


def secure_query(options: QueryOptions, subdomain: str) -> QueryOptions:
    """
    Pin a listing query to the caller's own tenant.
    Every client filter on `subdomain` is dropped (whatever its operator) and
    replaced by a single `subdomain == <caller subdomain>` clause.
    """
    kept = [f for f in options.filters if f.field != SUBDOMAIN_FIELD]
    kept.append(QueryFilter(field=SUBDOMAIN_FIELD, operator="==", value=subdomain))
    return options.model_copy(update={"filters": kept})


def _clause(f: QueryFilter) -> dict:
    """
    Translate one {field, operator, value} filter to a Mongo clause.
    List operators require a list value.
    """
    op = f.operator
    if op == "==":
        return {f.field: {"$eq": f.value}}
    if op in _COMPARISON_OPS:
        return {f.field: {_COMPARISON_OPS[op]: f.value}}
    if op == "array-contains":
        return {f.field: {"$elemMatch": {"$eq": f.value}}}

    # in / not-in / array-contains-any
    if not isinstance(f.value, list):
        raise ValidationError(f"Operator '{op}' on field '{f.field}' requires a list value.")
    if op == "not-in":
        return {f.field: {"$nin": f.value}}
    return {f.field: {"$in": f.value}}


def mongo_filter(options: QueryOptions) -> dict:
    """
    Build the Mongo filter document for a QueryOptions.
    Clauses are AND-ed; `$and` keeps two filters on the same field from
    overwriting each other.
    """
    clauses = [_clause(f) for f in options.filters]
    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}
