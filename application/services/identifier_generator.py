"""Assigns collision-free integer identifiers to new documents."""
from __future__ import annotations

import logging
import math
import random
from typing import Iterator

from domain.entities import IndexConfiguration, IndexedDocument
from domain.errors import SpaceExhausted
from domain.interfaces import DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_PROBABILITY = 1e-9
MIN_ATTEMPTS = 16
MAX_ATTEMPTS = 1_000_000
_LARGE_BUDGET = 1000


class IdentifierGenerator:
    """Draws random identifiers and probes the store until a free one is found.

    The number of draws is bounded by the free share of the identifier space:
    enough attempts that a miss happens with at most ``failure_probability``.
    Spaces no larger than that budget are walked as a shuffled permutation, so
    a free slot is always found when one exists.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        rng: random.Random | None = None,
        failure_probability: float = DEFAULT_FAILURE_PROBABILITY,
    ) -> None:
        if not 0.0 < failure_probability < 1.0:
            raise ValueError("failure_probability must be in (0, 1)")
        self._store = store
        self._rng = rng or random.SystemRandom()
        self._failure_probability = failure_probability

    def assign(self, configuration: IndexConfiguration) -> int:
        space = configuration.id_space
        used = self._store.count(configuration.class_tag)
        if used >= space:
            raise SpaceExhausted(configuration.class_tag, 0)

        budget = self.retry_budget(space, used)
        if budget > _LARGE_BUDGET:
            logger.warning(
                "Identifier space for %s is crowded (%d of %d used); up to %d draws",
                configuration.class_tag,
                used,
                space,
                budget,
            )

        attempts = 0
        for candidate in self._candidates(space, budget):
            attempts += 1
            if self._store.find_by_identifier(configuration.class_tag, candidate) is None:
                return candidate
            logger.debug("Identifier %d taken in %s, drawing again", candidate, configuration.class_tag)
        raise SpaceExhausted(configuration.class_tag, attempts)

    def ensure_identifier(self, document: IndexedDocument, configuration: IndexConfiguration) -> int:
        """Assign an identifier unless the document already carries one."""

        if document.identifier is None:
            document.identifier = self.assign(configuration)
        return document.identifier

    def retry_budget(self, space: int, used: int) -> int:
        free_fraction = (space - used) / space
        if free_fraction <= 0.0:
            return 0
        if free_fraction >= 1.0:
            return MIN_ATTEMPTS
        budget = math.log(self._failure_probability) / math.log1p(-free_fraction)
        return min(MAX_ATTEMPTS, max(MIN_ATTEMPTS, math.ceil(budget)))

    def _candidates(self, space: int, budget: int) -> Iterator[int]:
        if space <= budget:
            # small space: visit every slot once
            order = list(range(space))
            self._rng.shuffle(order)
            yield from order
            return
        for _ in range(budget):
            yield self._rng.randrange(space)


__all__ = ["IdentifierGenerator", "DEFAULT_FAILURE_PROBABILITY", "MAX_ATTEMPTS", "MIN_ATTEMPTS"]
