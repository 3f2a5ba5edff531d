"""Reassignment tuning loaded from the environment."""

from __future__ import annotations

from skushift.domain.reassignment import ReassignmentOptions

from .env import env_int, env_list

DEFAULT_DETACH_CONCURRENCY = 3
DEFAULT_CONFLICT_RETRIES = 3


def get_reassignment_options() -> ReassignmentOptions:
    return ReassignmentOptions(
        blacklist=frozenset(env_list("REASSIGNMENT_BLACKLIST")),
        retain_existing_attributes=env_list("REASSIGNMENT_RETAIN_ATTRIBUTES"),
        detach_concurrency=env_int(
            "REASSIGNMENT_DETACH_CONCURRENCY", DEFAULT_DETACH_CONCURRENCY, minimum=1
        ),
        max_conflict_retries=env_int("REASSIGNMENT_CONFLICT_RETRIES", DEFAULT_CONFLICT_RETRIES),
    )
