"""Seeded source of randomness shared by everything in one generation batch."""
from datetime import datetime, timedelta
from typing import Any, Optional, Sequence

from faker import Faker

from setup_data.core.config import DEFAULT_REFERENCE_DATE

DATE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"

SECONDS_PER_DAY = 24 * 60 * 60


class RandomStream:
    """A seeded Faker instance and the ``random.Random`` behind it.

    All draws go through the same underlying generator, so a batch is
    reproducible as long as values are requested in the same order. Dates
    are offsets from ``reference_date``; the wall clock is never read.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        locale: Optional[str] = None,
        reference_date: datetime = DEFAULT_REFERENCE_DATE,
    ):
        self.seed = seed
        self.faker = Faker(locale)
        self.faker.seed_instance(seed)
        self.random = self.faker.random
        self.reference_date = reference_date

    def randint(self, low: int, high: int) -> int:
        return self.random.randint(low, high)

    def uniform(self, low: float, high: float, digits: int = 2) -> float:
        return round(self.random.uniform(low, high), digits)

    def chance(self, probability: float) -> bool:
        return self.random.random() < probability

    def choice(self, values: Sequence[Any]) -> Any:
        return self.random.choice(values)

    def boolean(self) -> bool:
        return self.random.random() < 0.5

    def datetime_between(self, days_before: int, days_after: int = 0) -> datetime:
        """Random moment between ``days_before`` days before and ``days_after`` days after the reference date."""
        offset = self.random.randint(-days_before * SECONDS_PER_DAY, days_after * SECONDS_PER_DAY)
        return self.reference_date + timedelta(seconds=offset)


def format_datetime(value: datetime) -> str:
    return value.strftime(DATE_TIME_FORMAT)


def format_date(value: datetime) -> str:
    return value.strftime(DATE_FORMAT)
