"""Cache key builders for owner-partitioned todo listings.

Owner ids must not contain KEY_SEP or glob metacharacters, otherwise one
owner's pattern could match another owner's keys.
"""

KEY_SEP = ":"
LIST_PREFIX = "todos"

_FORBIDDEN = frozenset(KEY_SEP + "*?[]\\")


def _validate_owner_id(owner_id: str) -> None:
    if not owner_id:
        raise ValueError("Cache key component 'owner_id' must not be empty")
    bad = _FORBIDDEN.intersection(owner_id)
    if bad:
        raise ValueError(
            f"Cache key component 'owner_id' must not contain {''.join(sorted(bad))!r}"
        )


def _validate_positive(value: int, name: str) -> None:
    # bool is an int subclass; True would silently render as "True"
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Cache key component {name!r} must be an integer >= 1")


def list_key(owner_id: str, page: int, limit: int) -> str:
    """Cache key for one page of an owner's todo listing."""
    _validate_owner_id(owner_id)
    _validate_positive(page, "page")
    _validate_positive(limit, "limit")
    return KEY_SEP.join((LIST_PREFIX, owner_id, "page", str(page), "limit", str(limit)))


def list_key_pattern(owner_id: str) -> str:
    """Glob pattern matching every cached listing page of one owner."""
    _validate_owner_id(owner_id)
    return f"{LIST_PREFIX}{KEY_SEP}{owner_id}{KEY_SEP}*"
