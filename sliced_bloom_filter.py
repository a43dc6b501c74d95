# sliced_bloom_filter.py
"""
Bloom filter "a fette": gli M bit del filtro sono divisi tra le k funzioni
hash, ognuna con la propria fetta di m = M / k bit. Nessun elemento è più
esposto degli altri ai falsi positivi.

La classe NON è thread-safe: per usarla da più thread serve un lock esterno
(oppure un filtro per thread).
"""

import gzip
import io
import logging
import operator
import struct
import zlib
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from bitarray import bitarray

from bloom_config import FilterConfig
from bloom_errors import FilterDecodeError, FilterFullError, InvalidParameterError
from bloom_interface import BloomFilterInterface
from bloom_params import derive_bits_per_slice, derive_geometry, derive_slices_count
from hash_buckets import get_hash_buckets, hash_token

logger = logging.getLogger(__name__)

Item = Union[str, bytes, int]

# capacity, false_positive_target, lunghezza del bit array
HEADER_FMT = "<qdQ"
# contatore degli inserimenti, scritto dopo i bit
COUNT_FMT = "<q"


class SlicedBloomFilter(BloomFilterInterface):
    def __init__(self, capacity: int, false_positive_target: float):
        """
        Il filtro deve contenere almeno `capacity` elementi mantenendo la
        probabilità di falso positivo sotto `false_positive_target`.
        Solleva InvalidParameterError se i parametri non sono validi.
        """
        self._slices_count = derive_slices_count(capacity, false_positive_target)
        self._bits_per_slice = derive_bits_per_slice(capacity, false_positive_target, self._slices_count)
        self._config = FilterConfig(operator.index(capacity), false_positive_target)
        self._bits = bitarray(self._slices_count * self._bits_per_slice, endian="little")
        self._bits.setall(0)
        self._count = 0
        logger.debug("SlicedBloomFilter creato: capacity=%d p=%g slices=%d bits_per_slice=%d",
                     self._config.capacity, false_positive_target, self._slices_count, self._bits_per_slice)

    # --- Proprietà (sola lettura) ---

    @property
    def config(self) -> FilterConfig:
        return self._config

    @property
    def capacity(self) -> int:
        return self._config.capacity

    @property
    def false_positive_target(self) -> float:
        return self._config.false_positive_target

    @property
    def slices_count(self) -> int:
        return self._slices_count

    @property
    def bits_per_slice(self) -> int:
        return self._bits_per_slice

    @property
    def num_bits(self) -> int:
        return len(self._bits)

    def size(self) -> int:
        """Numero di inserimenti effettuati (anche duplicati)."""
        return self._count

    def __len__(self) -> int:
        return self._count

    def __bool__(self) -> bool:
        # un filtro vuoto resta un oggetto valido
        return True

    def __repr__(self) -> str:
        return (f"SlicedBloomFilter(capacity={self.capacity}, "
                f"false_positive_target={self.false_positive_target}, "
                f"slices_count={self._slices_count}, bits_per_slice={self._bits_per_slice}, "
                f"count={self._count})")

    # --- Posizioni nel bit array ---

    def _positions(self, item: Item) -> List[int]:
        """Posizione assoluta del bit di ogni fetta: i * bits_per_slice + bucket[i]."""
        buckets = get_hash_buckets(hash_token(item), self._slices_count, self._bits_per_slice)
        return [i * self._bits_per_slice + b for i, b in enumerate(buckets)]

    # --- Interrogazione ---

    def might_contain(self, item: Item) -> bool:
        """True se l'elemento è potenzialmente presente, False se sicuramente assente."""
        for index in self._positions(item):
            if not self._bits[index]:
                return False
        return True

    def contains(self, items: Union[Item, Sequence[Item]]) -> Union[bool, List[bool]]:
        """
        Accetta sia un elemento singolo che una sequenza di elementi.
        """
        if isinstance(items, (str, bytes, int)):
            return self.might_contain(items)
        return [self.might_contain(i) for i in items]

    def is_full(self) -> bool:
        """True quando il contatore supera `capacity`: sono ammessi capacity + 1 inserimenti."""
        return self._count > self._config.capacity

    # --- Inserimento ---

    def add(self, item: Item) -> bool:
        """
        Aggiunge l'elemento se non risulta già presente.
        Ritorna True se era (probabilmente) già nel filtro, False altrimenti.
        """
        if self.might_contain(item):
            return True
        self.add_without_check(item)
        return False

    def add_without_check(self, item: Item) -> None:
        """
        Aggiunge l'elemento senza verificarne la presenza: il contatore
        cresce di uno anche se tutti i bit erano già impostati.
        """
        if self.is_full():
            raise FilterFullError(f"filtro pieno: {self._count} inserimenti su capacity={self.capacity}")
        for index in self._positions(item):
            self._bits[index] = 1
        self._count += 1

    # --- Caricamento da file ---

    def build(self, source: Union[str, Path, Iterable[Union[str, Path]]]) -> int:
        """
        Carica elementi nel filtro, una riga per elemento.
        Accetta:
         - Un singolo percorso (str o Path) -> Carica quel file.
         - Una lista di percorsi (Iterable) -> Carica tutti i file nella lista.
        Ritorna: Il numero totale di righe lette.
        """
        if not isinstance(source, (str, Path)) and isinstance(source, Iterable):
            total = 0
            for single_path in source:
                total += self.build(single_path)
            return total

        path = Path(source)
        if not path.exists():
            logger.warning("File %s non trovato, ignorato", path)
            return 0

        count = 0
        with path.open("r", encoding="utf-8", errors="ignore") as f:
            for line in f:
                item = line.strip()
                if item:
                    self.add(item)
                    count += 1
        return count

    def verify_from_paths(self, paths: Iterable[Union[str, Path]]) -> List[bool]:
        results: List[bool] = []
        for p in paths:
            path_obj = Path(p)
            if not path_obj.exists():
                logger.warning("File %s non trovato, ignorato", path_obj)
                continue
            with path_obj.open("r", encoding="utf-8", errors="ignore") as f:
                lines = [line.strip() for line in f if line.strip()]
            results.extend(self.contains(lines))
        return results

    # --- Persistenza ---

    def tofile(self, f) -> None:
        """
        Scrive il filtro compresso con gzip: capacity, false_positive_target,
        i bit e infine il contatore. La geometria non viene salvata, si
        ricalcola in lettura.
        """
        with gzip.GzipFile(fileobj=f, mode="wb", mtime=0) as gz:
            gz.write(struct.pack(HEADER_FMT, self.capacity, self.false_positive_target, len(self._bits)))
            gz.write(self._bits.tobytes())
            gz.write(struct.pack(COUNT_FMT, self._count))
        logger.debug("Filtro serializzato: %d bit, count=%d", len(self._bits), self._count)

    @classmethod
    def fromfile(cls, f) -> "SlicedBloomFilter":
        """Ricostruisce un filtro scritto da tofile(). Errori -> FilterDecodeError."""
        try:
            with gzip.GzipFile(fileobj=f, mode="rb") as gz:
                payload = gz.read()
        except (OSError, EOFError, zlib.error) as exc:
            raise FilterDecodeError(f"stream gzip non valido: {exc}") from exc
        return cls._decode(payload)

    @classmethod
    def _decode(cls, payload: bytes) -> "SlicedBloomFilter":
        header_len = struct.calcsize(HEADER_FMT)
        count_len = struct.calcsize(COUNT_FMT)
        if len(payload) < header_len + count_len:
            raise FilterDecodeError(f"stream troncato: {len(payload)} byte")

        capacity, p, num_bits = struct.unpack_from(HEADER_FMT, payload)
        try:
            slices_count, bits_per_slice = derive_geometry(capacity, p)
        except InvalidParameterError as exc:
            raise FilterDecodeError(f"intestazione non valida: {exc}") from exc
        if num_bits != slices_count * bits_per_slice:
            raise FilterDecodeError(
                f"lunghezza bit {num_bits} diversa dalla geometria {slices_count}x{bits_per_slice}")

        n_bytes = (num_bits + 7) // 8
        if len(payload) != header_len + n_bytes + count_len:
            raise FilterDecodeError(
                f"lunghezza stream {len(payload)} byte, attesi {header_len + n_bytes + count_len}")

        bits = bitarray(endian="little")
        bits.frombytes(payload[header_len:header_len + n_bytes])
        del bits[num_bits:]
        (count,) = struct.unpack_from(COUNT_FMT, payload, header_len + n_bytes)
        if not 0 <= count <= capacity + 1:
            raise FilterDecodeError(f"contatore fuori intervallo: {count}")

        bf = cls(capacity, p)
        bf._bits = bits
        bf._count = count
        logger.debug("Filtro caricato: %r", bf)
        return bf

    def to_bytes(self) -> bytes:
        buf = io.BytesIO()
        self.tofile(buf)
        return buf.getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> "SlicedBloomFilter":
        return cls.fromfile(io.BytesIO(data))

    def save(self, path: Union[str, Path]) -> None:
        """Scrive su un file temporaneo accanto a `path` e lo sostituisce solo a scrittura completata."""
        path = Path(path)
        tmp = path.with_name(path.name + ".tmp")
        try:
            with tmp.open("wb") as f:
                self.tofile(f)
            tmp.replace(path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise

    @classmethod
    def load(cls, path: Union[str, Path]) -> "SlicedBloomFilter":
        with Path(path).open("rb") as f:
            return cls.fromfile(f)
