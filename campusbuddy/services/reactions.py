"""Message reaction toggling. Pure functions over the stored JSON list."""
from typing import Any, Dict, List


def toggle_reaction(reactions: List[Dict[str, Any]], emoji: str, user_id: str) -> List[Dict[str, Any]]:
    """
    Add or remove `user_id` under `emoji`, returning a new list.

    One slot per (user, emoji); a user may hold several emojis. `count`
    always equals len(userIds) and an emoji with no users is dropped.
    """
    updated: List[Dict[str, Any]] = []
    found = False

    for reaction in reactions or []:
        user_ids = list(reaction.get("userIds", []))
        if reaction.get("emoji") == emoji:
            found = True
            if user_id in user_ids:
                user_ids.remove(user_id)
            else:
                user_ids.append(user_id)
            if not user_ids:
                continue
        updated.append({"emoji": reaction.get("emoji"), "userIds": user_ids, "count": len(user_ids)})

    if not found:
        updated.append({"emoji": emoji, "userIds": [user_id], "count": 1})

    return updated
