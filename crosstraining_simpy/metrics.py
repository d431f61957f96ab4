"""
Colectores estadísticos en línea y resumen de métricas de la simulación.
Incluye: estadísticas por muestras (Welford) y ponderadas por tiempo.
"""

import math
from typing import Dict, List, Optional, Sequence, Union

import pandas as pd
import simpy


class BasicStatistics:
    """Mínimo, máximo, total, media y varianza sobre observaciones discretas."""

    def __init__(self):
        self.reset()

    @property
    def variance(self) -> float:
        """Varianza poblacional (M2 / n)."""
        return self._m2 / self.count if self.count > 0 else 0.0

    @property
    def std_dev(self) -> float:
        return math.sqrt(self.variance)

    def add(self, value: float):
        """Agrega una observación (actualización de Welford)."""
        self.count += 1
        self.total += value

        if self.count == 1:
            self.min = self.max = self.mean = value
            return

        if value < self.min:
            self.min = value
        if value > self.max:
            self.max = value

        old_mean = self.mean
        self.mean = old_mean + (value - old_mean) / self.count
        self._m2 += (value - old_mean) * (value - self.mean)

    def reset(self):
        self.count = 0
        self.min = 0.0
        self.max = 0.0
        self.total = 0.0
        self.mean = 0.0
        self._m2 = 0.0


class TimeBasedStatistics:
    """
    Estadísticas de una función escalón sobre el tiempo simulado.

    Cada `update_to` integra el nivel ANTERIOR durante el tiempo transcurrido
    desde la última actualización (área, media y varianza ponderadas por
    duración). La primera actualización sólo inicializa min/max/media.
    """

    def __init__(self, env: simpy.Environment, initial: float = 0.0):
        """
        Args:
            env: Entorno SimPy (reloj simulado)
            initial: Nivel inicial
        """
        self.env = env
        self.count = 0
        self.total_time = 0.0
        self.min = 0.0
        self.max = 0.0
        self.area = 0.0
        self.mean = 0.0
        self._variance = 0.0
        self._first_sample = False
        self._last_update_time = env.now
        self._last_value = initial

    @property
    def current(self) -> float:
        return self._last_value

    @property
    def variance(self) -> float:
        return self._variance / self.total_time if self.total_time > 0 else 0.0

    @property
    def std_dev(self) -> float:
        return math.sqrt(self.variance)

    def reset(self, initial: float = 0.0):
        """
        Descarta lo acumulado y fija el nivel actual en `initial` a partir de
        `env.now` (corte de calentamiento sin romper el estado vivo).
        """
        self.count = 0
        self.total_time = 0.0
        self.min = self.max = self.area = self.mean = 0.0
        self._variance = 0.0
        self._first_sample = False
        self._last_update_time = self.env.now
        self._last_value = initial

    def increase(self, value: float = 1):
        self.update_to(self._last_value + value)

    def decrease(self, value: float = 1):
        self.update_to(self._last_value - value)

    def update_to(self, value: float):
        self.count += 1

        if not self._first_sample:
            self.min = self.max = self.mean = value
            self._first_sample = True
        else:
            if value < self.min:
                self.min = value
            if value > self.max:
                self.max = value

            duration = self.env.now - self._last_update_time
            if duration > 0:
                self.area += self._last_value * duration
                old_mean = self.mean
                self.mean = old_mean + (self._last_value - old_mean) * duration / (duration + self.total_time)
                self._variance += (self._last_value - old_mean) * (self._last_value - self.mean) * duration
                self.total_time += duration

        self._last_update_time = self.env.now
        self._last_value = value


Collector = Union[BasicStatistics, TimeBasedStatistics]


class SimulationMetrics:
    """Resume los colectores de una corrida en una tabla."""

    def __init__(self, collectors: Dict[str, Union[Collector, Sequence[Collector]]]):
        """
        Args:
            collectors: {nombre: colector o lista de colectores indexados}
        """
        self.collectors = collectors

    def _rows(self) -> List[Dict]:
        rows = []
        for name, collector in self.collectors.items():
            if isinstance(collector, (list, tuple)):
                for idx, c in enumerate(collector):
                    rows.append(self._row(f"{name}[{idx}]", c))
            else:
                rows.append(self._row(name, collector))
        return rows

    @staticmethod
    def _row(name: str, c: Collector) -> Dict:
        row = {
            "metric": name,
            "kind": "time" if isinstance(c, TimeBasedStatistics) else "sample",
            "mean": c.mean,
            "std_dev": c.std_dev,
            "min": c.min,
            "max": c.max,
            "count": c.count,
        }
        if isinstance(c, TimeBasedStatistics):
            row["current"] = c.current
            row["total_time"] = c.total_time
        else:
            row["current"] = None
            row["total_time"] = None
        return row

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self._rows(), columns=[
            "metric", "kind", "mean", "std_dev", "min", "max", "count", "current", "total_time"
        ])

    def get_all_metrics(self) -> Dict[str, float]:
        """{nombre: media} de todos los colectores."""
        return {row["metric"]: row["mean"] for row in self._rows()}

    def print_metrics(self, title: Optional[str] = None, include_indexed: bool = False):
        """Imprime un reporte formateado de las métricas."""
        print(f"\n{'='*70}")
        print(f"[METRICS] {title or 'SIMULATOR METRICS'}")
        print(f"{'='*70}")
        for row in self._rows():
            if "[" in row["metric"] and not include_indexed:
                continue
            print(f"{row['metric']:<28s} media={row['mean']:10.4f}  "
                  f"desv={row['std_dev']:10.4f}  n={row['count']:6d}")
        print(f"{'='*70}\n")
