"""
tagcache - Key/Tag Mapper

Turns caller-supplied keys and tag names into the identifiers actually stored,
so several cache instances can share one table without colliding.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class KeyMapper:
    """Prefixes and sanitises keys and tags."""

    prefix_key: str
    prefix_tag: str

    def map_key(self, key: str) -> str:
        """Return the prefixed, sanitised storage key."""
        return self.sanitise(f"{self.prefix_key}{key}")

    def map_tag(self, tag: str) -> str:
        """Return the prefixed, sanitised storage tag."""
        return self.sanitise(f"{self.prefix_tag}{tag}")

    @staticmethod
    def sanitise(value: str) -> str:
        # Identity: character substitution would break injectivity of mapped keys.
        return value
