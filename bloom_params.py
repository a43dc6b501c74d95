# bloom_params.py
# Parametri ottimali di un Bloom filter a fette (slices).
#
#   k = ceil(log2(1 / p))                         numero di fette / funzioni hash
#   m = ceil(n * |ln p| / (k * ln(2)^2))          bit per fetta
#
# Le funzioni sono deterministiche: costruzione e caricamento da file
# devono ottenere la stessa geometria a partire da (n, p).

import math
import operator
from numbers import Integral, Real
from typing import Tuple

from bloom_errors import InvalidParameterError


def _check_capacity(capacity: int) -> int:
    """Accetta qualsiasi intero (anche numpy.int64) e lo restituisce come int."""
    if isinstance(capacity, bool) or not isinstance(capacity, Integral):
        raise InvalidParameterError(f"capacity deve essere un intero, ricevuto {capacity!r}")
    capacity = operator.index(capacity)
    if capacity <= 0:
        raise InvalidParameterError(f"capacity deve essere > 0, ricevuto {capacity}")
    return capacity


def _check_error_rate(p: float) -> None:
    if isinstance(p, bool) or not isinstance(p, Real):
        raise InvalidParameterError(f"false_positive_target deve essere un numero, ricevuto {p!r}")
    if not 0 < p < 1:
        raise InvalidParameterError(f"false_positive_target deve essere in (0, 1), ricevuto {p}")


def derive_slices_count(capacity: int, p: float) -> int:
    """Numero di fette (= funzioni hash) per il tasso di errore p."""
    _check_capacity(capacity)
    _check_error_rate(p)
    return max(1, int(math.ceil(math.log(1.0 / p, 2))))


def derive_bits_per_slice(capacity: int, p: float, slices_count: int) -> int:
    """Larghezza di ogni fetta, in bit."""
    capacity = _check_capacity(capacity)
    _check_error_rate(p)
    if isinstance(slices_count, bool) or not isinstance(slices_count, int) or slices_count < 1:
        raise InvalidParameterError(f"slices_count deve essere un intero >= 1, ricevuto {slices_count!r}")
    ln2 = math.log(2.0)
    m = math.ceil((capacity * abs(math.log(p))) / (slices_count * ln2 ** 2))
    return max(1, int(m))


def derive_geometry(capacity: int, p: float) -> Tuple[int, int]:
    """Restituisce (slices_count, bits_per_slice)."""
    k = derive_slices_count(capacity, p)
    return k, derive_bits_per_slice(capacity, p, k)
