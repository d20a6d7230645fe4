"""Tunable defaults shared by the services and controllers."""

DEFAULT_QUERY_DAYS = 7
DEFAULT_RECONCILE_ATTEMPTS = 3
DEFAULT_NEXT_CLASS_LOOKAHEAD_DAYS = 14
MAX_NOTES_LENGTH = 500
MAX_QUERY_DAYS = 366
PAST_SEARCH_DAYS = 365
