"""Internal constants shared across the library."""

ID_FIELD = "id"
TYPE_FIELD = "type"

#: Field names owned by the coordinator. Callers and contributors can never set them.
RESERVED_FIELDS: frozenset[str] = frozenset({ID_FIELD, TYPE_FIELD})

#: Counter key holding the last assigned record id.
DEFAULT_COUNTER_KEY = "last_index"
