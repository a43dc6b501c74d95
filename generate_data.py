# generate_data.py
# Genera dataset Train e Test DISGIUNTI della stessa dimensione, frammentati in piu' file.
# Il Test non contiene elementi del Train: ogni "presente" sul Test e' un falso positivo.

import random
import string
import shutil
from pathlib import Path
from concurrent.futures import ProcessPoolExecutor
from typing import List, Set, Tuple

# Dimensioni totali del dataset (Righe) = capacity dei filtri nel benchmark
DATASET_SIZES = [10_000, 50_000, 100_000, 500_000]

# In quanti file spezzare il carico?
SPLIT_COUNTS = [1, 4]

BASE_DIR = Path("bench_data")

CHARS = string.ascii_lowercase + string.digits


def random_item(rng: random.Random) -> str:
    return ''.join(rng.choices(CHARS, k=rng.randint(10, 20)))


def generate_disjoint(num_lines: int, seed: int = None) -> Tuple[List[str], List[str]]:
    """Genera due liste di stringhe uniche, senza elementi in comune."""
    rng = random.Random(seed)
    seen: Set[str] = set()

    def take(n: int) -> List[str]:
        out = []
        while len(out) < n:
            s = random_item(rng)
            if s not in seen:
                seen.add(s)
                out.append(s)
        return out

    train = take(num_lines)
    test = take(num_lines)
    return train, test


def write_file(path: Path, lines: List[str]) -> None:
    path.write_text("\n".join(lines), encoding="utf-8")


def split_lines(lines: List[str], split: int) -> List[List[str]]:
    """Divide le righe in `split` parti il piu' possibile uguali."""
    per_file, remainder = divmod(len(lines), split)
    parts, idx = [], 0
    for i in range(split):
        count = per_file + (1 if i < remainder else 0)
        parts.append(lines[idx:idx + count])
        idx += count
    return parts


def write_dataset(base_dir: Path, size: int, splits: List[int], seed: int = None) -> Path:
    """Scrive size_N/split_S/{train,test}/*.txt e ritorna la cartella size_N."""
    train, test = generate_disjoint(size, seed)
    size_dir = base_dir / f"size_{size}"

    for split in splits:
        split_dir = size_dir / f"split_{split}"
        train_dir = split_dir / "train"
        test_dir = split_dir / "test"
        train_dir.mkdir(parents=True, exist_ok=True)
        test_dir.mkdir(parents=True, exist_ok=True)

        print(f"   -> Scrittura configurazione {split} file...")
        with ProcessPoolExecutor() as executor:
            futures = []
            for i, (sub_train, sub_test) in enumerate(zip(split_lines(train, split), split_lines(test, split))):
                futures.append(executor.submit(write_file, train_dir / f"train_{i:02d}.txt", sub_train))
                futures.append(executor.submit(write_file, test_dir / f"test_{i:02d}.txt", sub_test))
            # Attesa completamento scrittura fisica
            for f in futures:
                f.result()

    return size_dir


def main():
    if BASE_DIR.exists():
        print("Pulizia vecchia cartella bench_data...")
        shutil.rmtree(BASE_DIR)
    BASE_DIR.mkdir()

    print("--- GENERAZIONE DATASET DISGIUNTI (TRAIN + TEST) ---")

    for size in DATASET_SIZES:
        print(f"\n> Dataset: {size} righe")
        write_dataset(BASE_DIR, size, SPLIT_COUNTS, seed=size)

    print(f"\n[OK] Dati pronti in {BASE_DIR}")


if __name__ == "__main__":
    main()
