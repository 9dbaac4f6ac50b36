"""Optional natural-language narration."""

from lifebalance.ai.narrator import Narrator, narrator_from_settings

__all__ = ["Narrator", "narrator_from_settings"]
