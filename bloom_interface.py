# bloom_interface.py

from abc import ABC, abstractmethod


class BloomFilterInterface(ABC):
    @abstractmethod
    def add(self, item) -> bool:
        """Aggiunge un elemento al filtro. True se era già (probabilmente) presente."""
        pass

    @abstractmethod
    def might_contain(self, item) -> bool:
        """Restituisce True se l'elemento potrebbe essere presente, False se sicuramente non lo è."""
        pass

    @abstractmethod
    def is_full(self) -> bool:
        """True se il filtro non accetta altri inserimenti."""
        pass

    def __contains__(self, item) -> bool:
        return self.might_contain(item)
