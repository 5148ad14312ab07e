# descriptor_store.py

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

import numpy as np

from config import DATA_DIR, DESCRIPTOR_DIM, FACE_DATABASE_FILE
from errors import ConfigurationError, InputError
from persistence import load_json, save_json
from ResourcePath import data_file

logger = logging.getLogger(__name__)


@dataclass
class Person:
    id: str
    name: str
    descriptor: np.ndarray
    date_added: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "descriptor": [float(v) for v in self.descriptor],
            "dateAdded": self.date_added,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Person":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            descriptor=np.asarray(data["descriptor"], dtype="float32"),
            date_added=str(data.get("dateAdded", "")),
        )


def normalize_name(name) -> str:
    """Trim a user-entered name. Raises InputError when nothing is left."""
    trimmed = (name or "").strip()
    if not trimmed:
        raise InputError("Please enter a name for this person.")
    return trimmed


class DescriptorStore:
    """
    Person -> reference descriptor, one record per (case-insensitive) name.

    Records keep insertion order; re-enrolling a name drops the old record
    and appends the new one.
    """

    def __init__(self, root_dir: str = DATA_DIR, dimension: int = DESCRIPTOR_DIM):
        self.path = data_file(root_dir, FACE_DATABASE_FILE)
        self.dimension = dimension
        self._people: List[Person] = self._load()

    # ---------- Read side ----------

    def _load(self) -> List[Person]:
        try:
            data = load_json(self.path)
        except ConfigurationError as e:
            logger.warning(f"Error loading face database, starting empty: {e}")
            return []
        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning(f"Face database at {self.path} is not a list, starting empty")
            return []

        people: List[Person] = []
        for raw in data:
            try:
                person = Person.from_dict(raw)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed face record: {e}")
                continue
            if person.descriptor.shape != (self.dimension,):
                logger.warning(
                    f"Skipping {person.name!r}: descriptor shape {person.descriptor.shape}, "
                    f"expected ({self.dimension},)"
                )
                continue
            people.append(person)

        logger.info(f"Loaded {len(people)} faces from {self.path}")
        return people

    def all(self) -> List[Person]:
        return list(self._people)

    def names(self) -> List[str]:
        return [p.name for p in self._people]

    def find(self, name: str) -> Optional[Person]:
        key = (name or "").strip().lower()
        for person in self._people:
            if person.name.lower() == key:
                return person
        return None

    def __contains__(self, name) -> bool:
        return self.find(name) is not None

    def __len__(self) -> int:
        return len(self._people)

    # ---------- Write side ----------

    def _now_iso(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    def _generate_person_id(self) -> str:
        max_num = 0
        for person in self._people:
            try:
                num = int(person.id.split("_")[1])
            except (IndexError, ValueError):
                continue
            max_num = max(max_num, num)
        return f"person_{max_num + 1:06d}"

    def enroll(self, name: str, descriptor: np.ndarray) -> Person:
        name = normalize_name(name)
        descriptor = np.asarray(descriptor, dtype="float32")
        if descriptor.shape != (self.dimension,):
            raise ConfigurationError(
                f"Descriptor must have shape ({self.dimension},), got {descriptor.shape}"
            )

        existing = self.find(name)
        if existing is not None:
            self._people = [p for p in self._people if p is not existing]
            logger.info(f"Replacing stored descriptor for {name!r}")

        person = Person(
            id=self._generate_person_id(),
            name=name,
            descriptor=descriptor.copy(),
            date_added=self._now_iso(),
        )
        self._people.append(person)
        self.save()
        logger.info(f"Enrolled {name!r} as {person.id}")
        return person

    def clear(self):
        self._people = []
        self.save()
        logger.info("Face database cleared")

    def save(self):
        save_json(self.path, self.to_list())

    def to_list(self) -> List[dict]:
        return [p.to_dict() for p in self._people]
