"""Repository for Person model"""

from cardregistry.models.person import Person
from cardregistry.repository.base import BaseRepository


class PersonRepository(BaseRepository[Person]):
    model = Person
