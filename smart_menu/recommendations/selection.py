from __future__ import annotations

import random
from collections import defaultdict
from typing import Sequence

from .models import ScoredCandidate

ADJACENT_SWAP_PROBABILITY = 0.3
ADJACENT_SWAP_MAX_GAP = 1.0
GROUP_TOP_N = 3


class SelectionEngine:
    """
    Randomised pickers over scored candidates.

    Holds nothing but its random source; pass ``random.Random(seed)`` for
    reproducible draws.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def select_one(self, scored: Sequence[ScoredCandidate]) -> ScoredCandidate | None:
        """Roulette-wheel pick: probability proportional to score."""
        pool = [c for c in scored if c.score > 0]
        if not pool:
            return None

        total = sum(c.score for c in pool)
        remainder = self.rng.random() * total
        for candidate in pool:
            remainder -= candidate.score
            if remainder <= 0:
                return candidate
        return pool[-1]

    def _shuffled_group(self, group: list[ScoredCandidate]) -> list[ScoredCandidate]:
        ordered = sorted(group, key=lambda c: c.score, reverse=True)
        for i in range(len(ordered) - 1):
            close = abs(ordered[i].score - ordered[i + 1].score) <= ADJACENT_SWAP_MAX_GAP
            if close and self.rng.random() < ADJACENT_SWAP_PROBABILITY:
                ordered[i], ordered[i + 1] = ordered[i + 1], ordered[i]
        return ordered

    def select_diverse(self, scored: Sequence[ScoredCandidate], count: int) -> list[ScoredCandidate]:
        """
        Pick up to *count* candidates, one per category first.

        Categories are visited in random order and each contributes one dish
        chosen at random among its three best. Remaining slots are filled from
        the unpicked candidates in random order.
        """
        if count <= 0 or not scored:
            return []
        if count == 1:
            one = self.select_one(scored)
            return [one] if one is not None else []

        # Zero-score candidates are only eligible when nothing scores above 0.
        pool = [c for c in scored if c.score > 0] or list(scored)

        groups: dict[str, list[ScoredCandidate]] = defaultdict(list)
        for candidate in pool:
            groups[candidate.dish.category or "Unknown"].append(candidate)

        categories = list(groups)
        self.rng.shuffle(categories)

        picked: list[ScoredCandidate] = []
        picked_ids: set[str] = set()
        for category in categories:
            if len(picked) >= count:
                break
            top = self._shuffled_group(groups[category])[:GROUP_TOP_N]
            choice = self.rng.choice(top)
            picked.append(choice)
            picked_ids.add(choice.dish.id)

        if len(picked) < count:
            remaining = [c for c in pool if c.dish.id not in picked_ids]
            self.rng.shuffle(remaining)
            for candidate in remaining:
                if len(picked) >= count:
                    break
                if candidate.dish.id in picked_ids:
                    continue
                picked.append(candidate)
                picked_ids.add(candidate.dish.id)

        return picked
