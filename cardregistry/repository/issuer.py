"""Repository for Issuer model"""

from cardregistry.models.issuer import Issuer
from cardregistry.repository.base import BaseRepository


class IssuerRepository(BaseRepository[Issuer]):
    model = Issuer
