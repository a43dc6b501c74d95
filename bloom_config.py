# bloom_config.py

from dataclasses import dataclass


@dataclass(frozen=True)
class FilterConfig:
    """Parametri di dimensionamento di un filtro, immutabili dopo la costruzione."""
    capacity: int
    false_positive_target: float
