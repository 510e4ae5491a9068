# server/linkgate/services/destination_resolver.py

import logging
import random
from typing import List, Optional, Sequence

from linkgate.models.snapshot import LinkSnapshot, WeightedDestination
from linkgate.models.visitor import VisitorContext

logger = logging.getLogger(__name__)


def matching_destinations(
    destinations: Sequence[WeightedDestination],
    context: VisitorContext,
) -> List[WeightedDestination]:
    return [d for d in destinations if d.rule.matches(context)]


def pick_weighted(candidates: Sequence[WeightedDestination], draw: float) -> Optional[WeightedDestination]:
    """Pick from ``candidates`` given a uniform ``draw`` in ``[0, 1)``.

    The draw is scaled to ``[0, total_weight)`` and each weight is
    subtracted in order until the remainder is non-positive.
    """
    if not candidates:
        return None

    total = sum(c.weight for c in candidates)
    if total <= 0:
        return candidates[0]

    remainder = draw * total
    for candidate in candidates:
        remainder -= candidate.weight
        if remainder <= 0:
            return candidate

    return candidates[-1]


class DestinationResolver:

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def resolve(self, link: LinkSnapshot, context: VisitorContext) -> str:
        if not link.destinations:
            return link.destination_url

        matches = matching_destinations(link.destinations, context)

        if not matches:
            logger.debug(f"No destination rule matched for {link.code}, using primary destination")
            return link.destination_url

        if len(matches) == 1:
            return matches[0].url

        chosen = pick_weighted(matches, self.rng.random())
        return chosen.url
