"""Abstract base class for entity extractors."""

from abc import ABC, abstractmethod

from talent_funnel.core.schemas import CriteriaModel


class EntityExtractor(ABC):
    """Turns a free-text search query into structured criteria."""

    @abstractmethod
    def extract(self, text: str) -> CriteriaModel:
        """Extract criteria from ``text``. May raise on failure."""
