# matching.py
# Face matching utilities

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from descriptor_store import DescriptorStore, Person
from errors import ConfigurationError

logger = logging.getLogger(__name__)


def find_best_match(embedding: np.ndarray, known_embeddings: np.ndarray):
    """
    Nearest known embedding by Euclidean distance.

    Returns (index, distance), or (None, inf) when nothing is known.
    Equal distances resolve to the lowest index.
    """
    if known_embeddings.size == 0:
        return None, float("inf")
    if known_embeddings.shape[1] != embedding.shape[-1]:
        raise ConfigurationError(
            f"Query descriptor has {embedding.shape[-1]} values, known descriptors have {known_embeddings.shape[1]}"
        )
    diffs = known_embeddings - embedding.reshape(1, -1)
    dists = np.linalg.norm(diffs, axis=1)
    idx = int(np.argmin(dists))
    return idx, float(dists[idx])


def distance_to_confidence(distance: float) -> float:
    """
    Map a descriptor distance to a recognition score.

    This is a monotonic heuristic (closer means higher), not a calibrated
    probability. Floored at 0; there is no upper clamp.
    """
    return max(0.0, 1.0 - distance)


@dataclass
class MatchResult:
    person: Optional[Person]
    distance: float

    @property
    def confidence(self) -> float:
        return distance_to_confidence(self.distance)


class Matcher:
    def __init__(self, store: DescriptorStore):
        self._store = store

    def match(self, descriptor) -> MatchResult:
        people = self._store.all()
        query = np.asarray(descriptor, dtype="float32").reshape(-1)
        if not people:
            return MatchResult(person=None, distance=float("inf"))

        known = np.vstack([p.descriptor for p in people]).astype("float32")
        idx, dist = find_best_match(query, known)
        person = people[idx]
        logger.debug(f"Best match {person.name} (dist={dist:.3f})")
        return MatchResult(person=person, distance=dist)
