"""Factory Boy setup for test data generation."""

from __future__ import annotations

import factory
from faker import Faker

faker = Faker()
Faker.seed(1234)


class BaseFactory(factory.Factory):
    """Base class for factories building immutable service records."""

    class Meta:
        abstract = True
