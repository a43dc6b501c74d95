# main.py
# Benchmark del SlicedBloomFilter: size × split × tasso di falsi positivi
# Include: warmup, wall-clock + CPU time, min/max/std, FPR osservato, dimensione su disco.

import time
import csv
import os
import gc
import statistics
import platform
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Union

from sliced_bloom_filter import SlicedBloomFilter


# ============================================================
# CONFIGURAZIONE
# ============================================================

BASE_DIR = Path("bench_data")

DATASET_SIZES = [10_000, 50_000, 100_000, 500_000]
SPLIT_COUNTS = [1, 4]
TARGET_FPRS = [0.1, 0.01, 0.001]

NUM_ROUNDS = 5         # ripetizioni misurate
WARMUP = 1             # primi run ignorati

CSV_OUT = "results_sliced.csv"
SYSTEM_INFO_FILE = "system_info.txt"


# ============================================================
# RACCOLTA INFO SISTEMA
# ============================================================

def write_system_info(path: Union[str, Path] = SYSTEM_INFO_FILE):
    with open(path, "w") as f:
        f.write("=== SYSTEM INFO ===\n")
        f.write(f"OS: {platform.system()} {platform.release()}\n")
        f.write(f"Python version: {platform.python_version()}\n\n")

        f.write("--- CPU ---\n")
        f.write(f"Cores (logical): {os.cpu_count()}\n")
        f.write(f"Processor: {platform.processor()}\n\n")

        try:
            import psutil
        except ImportError:
            f.write("RAM: psutil non installato\n")
        else:
            ram = round(psutil.virtual_memory().total / (1024**3), 2)
            f.write(f"RAM: {ram} GB\n")

    print(f"Saved system info → {path}")


# ============================================================
# MISURE
# ============================================================

def observed_false_positive_rate(results: Sequence[bool]) -> float:
    """Frazione di "presente" su un insieme di elementi mai inseriti."""
    if not results:
        return 0.0
    return sum(results) / len(results)


def _stats(prefix: str, values: List[float]) -> Dict[str, float]:
    return {
        f"{prefix}_mean": statistics.mean(values),
        f"{prefix}_min": min(values),
        f"{prefix}_max": max(values),
        f"{prefix}_std": statistics.stdev(values) if len(values) > 1 else 0.0,
    }


def run_trial(capacity: int, target_fpr: float, train_files: Iterable[Path], test_files: Iterable[Path],
              rounds: int = NUM_ROUNDS, warmup: int = WARMUP) -> Dict[str, float]:
    """
    Costruisce `rounds + warmup` filtri dai file train e li verifica sui file test.
    I primi `warmup` run non sono misurati.
    """
    train_files = list(train_files)
    test_files = list(test_files)

    build_times, verify_times, cpu_times = [], [], []
    bf = None
    results: List[bool] = []

    for r in range(rounds + warmup):
        gc.collect()
        bf = SlicedBloomFilter(capacity, target_fpr)

        t_cpu0 = time.process_time()

        t0 = time.perf_counter()
        bf.build(train_files)
        t_build = time.perf_counter() - t0

        t0 = time.perf_counter()
        results = bf.verify_from_paths(test_files)
        t_verify = time.perf_counter() - t0

        t_cpu = time.process_time() - t_cpu0

        if r >= warmup:
            build_times.append(t_build)
            verify_times.append(t_verify)
            cpu_times.append(t_cpu)

    row = {
        "slices": bf.slices_count,
        "bits_per_slice": bf.bits_per_slice,
        "inserted": bf.size(),
        "observed_fpr": observed_false_positive_rate(results),
        "persisted_bytes": len(bf.to_bytes()),
        "cpu_mean": statistics.mean(cpu_times),
    }
    row.update(_stats("build", build_times))
    row.update(_stats("verify", verify_times))
    return row


# ============================================================
# BENCHMARK
# ============================================================

def run_benchmark():

    write_system_info(SYSTEM_INFO_FILE)

    print(f"\n--- BENCHMARK SLICED ({NUM_ROUNDS} rounds, {WARMUP} warmup) ---")
    print(f"Output → {CSV_OUT}\n")

    if not BASE_DIR.exists():
        print("ERRORE: genera prima i dataset (python generate_data.py)!")
        return

    fieldnames = [
        "size", "split", "target_fpr", "observed_fpr",
        "slices", "bits_per_slice", "inserted", "persisted_bytes",
        "build_mean", "build_min", "build_max", "build_std",
        "verify_mean", "verify_min", "verify_max", "verify_std",
        "cpu_mean",
    ]

    with open(CSV_OUT, "w", newline="") as csv_f:
        writer = csv.DictWriter(csv_f, fieldnames=fieldnames)
        writer.writeheader()

        for size in DATASET_SIZES:

            print(f"\n=== SIZE = {size} ===")
            size_dir = BASE_DIR / f"size_{size}"

            for split in SPLIT_COUNTS:

                split_dir = size_dir / f"split_{split}"
                train_files = sorted((split_dir / "train").glob("*.txt"))
                test_files = sorted((split_dir / "test").glob("*.txt"))

                if not train_files:
                    continue

                print(f"\n→ Split={split} ({len(train_files)} train files)")

                for target in TARGET_FPRS:
                    row = run_trial(size, target, train_files, test_files, rounds=NUM_ROUNDS, warmup=WARMUP)
                    print(f"   p={target}: osservato={row['observed_fpr']:.5f} "
                          f"k={row['slices']} m={row['bits_per_slice']} "
                          f"build={row['build_mean']:.3f}s verify={row['verify_mean']:.3f}s")

                    row.update({"size": size, "split": split, "target_fpr": target})
                    writer.writerow(row)
                    csv_f.flush()

    print("\nBenchmark COMPLETATO con successo!")
    print(f"Risultati salvati in → {CSV_OUT}")
    print(f"System info salvate in → {SYSTEM_INFO_FILE}")


if __name__ == "__main__":
    run_benchmark()
