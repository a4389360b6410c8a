"""Base generator class for id-issuing components."""

from __future__ import annotations

import random
from abc import ABC

from faker import Faker


class BaseGenerator(ABC):
    """Base class for components that mint identifiers or synthetic records.

    Provides a Faker instance with seed-based reproducibility, so a seeded
    generator issues the same ids for the same inputs.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale (default ``es_MX``).
    """

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "es_MX",
    ) -> None:
        self.fake = Faker(locale)
        self.seed = seed
        if seed is not None:
            self.fake.seed_instance(seed)
            random.seed(seed)

    def new_id(self) -> str:
        """Return a new UUID4 string."""
        return self.fake.uuid4()
