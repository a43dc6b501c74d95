# bloom_errors.py


class BloomFilterError(Exception):
    """Eccezione base per tutti gli errori dei filtri."""


class InvalidParameterError(BloomFilterError, ValueError):
    """Capacità o tasso di falsi positivi non validi."""


class FilterFullError(BloomFilterError):
    """Il filtro ha raggiunto la capacità: l'inserimento è rifiutato."""


class FilterDecodeError(BloomFilterError, OSError):
    """Stream persistito troncato, corrotto o non decomprimibile."""
