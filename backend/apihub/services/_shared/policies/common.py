def is_owner(*, actor_id, owner_id) -> bool:
    """Return True if a present actor owns the resource; ownerless rows have no owner."""
    if actor_id is None or owner_id is None:
        return False
    return str(actor_id) == str(owner_id)
