"""Contains code for caching conditions coverage. It is done to improve performance by
avoiding recalculating coverage of the same elementary condition each time it is
tested by a condition generator or added to, or removed from rule conditions.
"""
from __future__ import annotations

from typing import Optional

import numpy as np

from vcdomlem.conditions import Condition
from vcdomlem.information_table import InformationTable


class ConditionsCoverageCache:
    """Cache for storing conditions coverages to avoid recalculating them.

    Cache is bound to a single information table, as covered masks are only
    meaningful for the table they were calculated on.
    """

    def __init__(self, information_table: InformationTable):
        self.information_table: InformationTable = information_table
        self.cache: dict[Condition, np.ndarray] = {}

        self.hits_count: int = 0
        self.misses_count: int = 0

    def get(self, condition: Condition) -> Optional[np.ndarray]:
        coverage: Optional[np.ndarray] = self.cache.get(condition)
        if coverage is None:
            self.misses_count += 1
        else:
            self.hits_count += 1
        return coverage

    def get_or_calculate(
        self, condition: Condition, save_to_cache: bool = True
    ) -> np.ndarray:
        coverage_mask: Optional[np.ndarray] = self.get(condition)
        if coverage_mask is None:
            coverage_mask = condition.covered_mask(self.information_table)
            # cached masks are shared, nobody should modify them in place
            coverage_mask.flags.writeable = False
            if save_to_cache:
                self.set(condition, coverage_mask)
        return coverage_mask

    def set(self, condition: Condition, value: np.ndarray):
        self.cache[condition] = value

    def update(self, cache: ConditionsCoverageCache):
        if cache.information_table is not self.information_table:
            raise ValueError("Cannot merge caches built for different tables")
        self.cache.update(cache.cache)

    def clear(self):
        self.cache.clear()
        self.hits_count = 0
        self.misses_count = 0
