"""
Unit Tests for message reaction toggling
"""
from campusbuddy.services.reactions import toggle_reaction


class TestToggleReaction:
    """Test the one-slot-per-(user, emoji) protocol"""

    def test_first_reaction_creates_entry(self):
        result = toggle_reaction([], "👍", "u1")

        assert result == [{"emoji": "👍", "userIds": ["u1"], "count": 1}]

    def test_second_user_joins_existing_emoji(self):
        reactions = [{"emoji": "👍", "userIds": ["u1"], "count": 1}]

        result = toggle_reaction(reactions, "👍", "u2")

        assert result == [{"emoji": "👍", "userIds": ["u1", "u2"], "count": 2}]

    def test_same_user_same_emoji_removes_reaction(self):
        reactions = [{"emoji": "👍", "userIds": ["u1", "u2"], "count": 2}]

        result = toggle_reaction(reactions, "👍", "u1")

        assert result == [{"emoji": "👍", "userIds": ["u2"], "count": 1}]

    def test_last_user_removed_drops_emoji(self):
        reactions = [
            {"emoji": "👍", "userIds": ["u1"], "count": 1},
            {"emoji": "🎉", "userIds": ["u2"], "count": 1},
        ]

        result = toggle_reaction(reactions, "👍", "u1")

        assert [r["emoji"] for r in result] == ["🎉"]

    def test_user_may_hold_several_emojis(self):
        reactions = toggle_reaction([], "👍", "u1")
        reactions = toggle_reaction(reactions, "❤️", "u1")

        assert [r["emoji"] for r in reactions] == ["👍", "❤️"]
        assert all(r["userIds"] == ["u1"] for r in reactions)

    def test_count_recomputed_from_user_ids(self):
        # A stale count in storage is corrected on the next toggle
        reactions = [{"emoji": "👍", "userIds": ["u1", "u2"], "count": 7}]

        result = toggle_reaction(reactions, "👍", "u3")

        assert result[0]["count"] == 3

    def test_input_list_not_mutated(self):
        reactions = [{"emoji": "👍", "userIds": ["u1"], "count": 1}]

        toggle_reaction(reactions, "👍", "u2")

        assert reactions == [{"emoji": "👍", "userIds": ["u1"], "count": 1}]

    def test_none_treated_as_empty(self):
        assert toggle_reaction(None, "🔥", "u1")[0]["count"] == 1
