# hash_buckets.py

from typing import List, Union

import mmh3

Token = Union[str, bytes]


def hash_token(item: Union[str, bytes, int]) -> Token:
    """
    Identità stabile di un elemento, passata a mmh3.
    Non usa hash() di Python: per le stringhe è randomizzato ad ogni processo
    e renderebbe inutilizzabile un filtro ricaricato da file.
    """
    if isinstance(item, (str, bytes)):
        return item
    if isinstance(item, int) and not isinstance(item, bool):
        return str(item)
    raise TypeError(f"elemento non supportato: {type(item).__name__} (usare str, bytes o int)")


def get_hash_buckets(token: Token, slices_count: int, bits_per_slice: int) -> List[int]:
    """Un offset in [0, bits_per_slice) per ogni fetta: la fetta i usa il seed i."""
    return [mmh3.hash(token, seed, signed=False) % bits_per_slice for seed in range(slices_count)]
