from uuid import UUID

from fastapi import Query


def get_profile_scope(
    profile_id: UUID | None = Query(default=None),
) -> UUID | None:
    # None = single-profile mode, queries span every profile
    return profile_id
