"""
tagcache - Key/Tag Mapper Tests
"""

from tagcache.mapping import KeyMapper


class TestKeyMapper:
    """Test suite for KeyMapper."""

    def test_map_key_prefixes(self) -> None:
        mapper = KeyMapper(prefix_key="k:", prefix_tag="t:")
        assert mapper.map_key("user:1") == "k:user:1"

    def test_map_tag_prefixes(self) -> None:
        mapper = KeyMapper(prefix_key="k:", prefix_tag="t:")
        assert mapper.map_tag("users") == "t:users"

    def test_sanitise_is_identity(self) -> None:
        assert KeyMapper.sanitise("a b/c\\d") == "a b/c\\d"

    def test_distinct_keys_stay_distinct(self) -> None:
        mapper = KeyMapper(prefix_key="k:", prefix_tag="t:")
        raw = ["a", "a ", "a/b", "a_b", "A", ""]
        assert len({mapper.map_key(key) for key in raw}) == len(raw)

    def test_deterministic(self) -> None:
        first = KeyMapper(prefix_key="k:", prefix_tag="t:")
        second = KeyMapper(prefix_key="k:", prefix_tag="t:")
        assert first.map_key("x") == second.map_key("x")
        assert first == second
