"""
Reglas de despacho de trabajadores (worker dispatching) a estaciones.
Implementa: FCFS, LSF, MLSF
"""

from enum import Enum
from typing import Callable, Dict, List, Sequence

import numpy as np
import simpy

from .errors import ConfigurationError
from .random_variates import min_items, sample_random
from .worker_pool import WorkerPool
from .workforce import BinaryQualifiedWorkforce


class DispatchStrategy(Enum):
    """Estrategias de asignación de trabajadores."""
    FIRST_COME_FIRST_SERVE = "FCFS"
    LEAST_SKILL_FIRST = "LSF"
    MODIFIED_LEAST_SKILL_FIRST = "MLSF"

    @classmethod
    def from_name(cls, name) -> "DispatchStrategy":
        """Acepta la abreviatura ('LSF') o el nombre del miembro ('LEAST_SKILL_FIRST')."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().upper()
        for strategy in cls:
            if key in (strategy.value, strategy.name, strategy.name.replace("_", "")):
                return strategy
        raise ConfigurationError(
            f"Regla de despacho no implementada: {name}. Use 'FCFS', 'LSF' o 'MLSF'"
        )


DESCRIPTIONS = {
    DispatchStrategy.FIRST_COME_FIRST_SERVE: "FCFS - First Come First Serve (primer trabajador calificado disponible)",
    DispatchStrategy.LEAST_SKILL_FIRST: "LSF - Least Skill First (trabajador libre con menos habilidades)",
    DispatchStrategy.MODIFIED_LEAST_SKILL_FIRST: "MLSF - Modified Least Skill First (sin cambio de estación primero)",
}


class WorkerDispatcher:
    """Decide qué trabajador solicitar para una estación."""

    def __init__(self,
                 pool: WorkerPool,
                 workforce: BinaryQualifiedWorkforce,
                 qualification_by_station: Sequence[int],
                 change_time: Sequence[Sequence[float]],
                 last_station_by_worker: List[int],
                 strategy: DispatchStrategy,
                 rng: np.random.Generator):
        """
        Args:
            pool: Pool de trabajadores compartido
            workforce: Matriz de calificaciones
            qualification_by_station: Habilidad requerida por cada estación
            change_time: Matriz de tiempos de cambio entre estaciones
            last_station_by_worker: Última estación de cada trabajador (-1 si ninguna);
                                    se lee por referencia, la mantiene el simulador
            strategy: Estrategia de despacho
            rng: Flujo aleatorio para desempates
        """
        self.pool = pool
        self.workforce = workforce
        self.qualification_by_station = qualification_by_station
        self.change_time = change_time
        self.last_station_by_worker = last_station_by_worker
        self.strategy = DispatchStrategy.from_name(strategy)
        self.rng = rng

        self._rules: Dict[DispatchStrategy, Callable[[int, int], simpy.events.Event]] = {
            DispatchStrategy.FIRST_COME_FIRST_SERVE: self.first_come_first_serve,
            DispatchStrategy.LEAST_SKILL_FIRST: self.least_skill_first,
            DispatchStrategy.MODIFIED_LEAST_SKILL_FIRST: self.modified_least_skill_first,
        }

    @property
    def description(self) -> str:
        return DESCRIPTIONS[self.strategy]

    def request_worker(self, station: int) -> simpy.events.Event:
        """
        Solicita un trabajador para `station` según la estrategia.

        Returns:
            Evento de solicitud al pool; su valor es el índice del trabajador

        Raises:
            ConfigurationError: Si ningún trabajador tiene la habilidad requerida
        """
        qualification = self.qualification_by_station[station]
        if (not 0 <= qualification < self.workforce.qualifications
                or not self.workforce.workers_by_skill(qualification)):
            raise ConfigurationError(f"No hay ningún trabajador calificado para la estación {station}")
        return self._rules[self.strategy](qualification, station)

    def first_come_first_serve(self, qualification: int, station: int) -> simpy.events.Event:
        """Cualquier trabajador calificado; el primero que conceda el pool."""
        return self.pool.request(lambda worker: self.workforce.is_qualified(worker, qualification))

    def least_skill_first(self, qualification: int, station: int) -> simpy.events.Event:
        """Entre los libres y calificados, el de menos habilidades."""
        avail = self.available_workers(qualification)
        if not avail:
            return self.first_come_first_serve(qualification, station)
        return self._request_exact(self._least_skilled(avail))

    def modified_least_skill_first(self, qualification: int, station: int) -> simpy.events.Event:
        """Como LSF, pero prefiere a los que no requieren tiempo de cambio."""
        avail = self.available_workers(qualification)
        if not avail:
            return self.first_come_first_serve(qualification, station)

        no_change_time = [w for w in avail if self.change_time_for(w, station) == 0]
        if no_change_time:
            return self._request_exact(self._least_skilled(no_change_time))
        return self._request_exact(self._least_skilled(avail))

    def available_workers(self, qualification: int) -> List[int]:
        """Trabajadores calificados actualmente libres."""
        return [
            w for w in self.workforce.workers_by_skill(qualification)
            if self.pool.is_available(lambda worker, w=w: worker == w)
        ]

    def change_time_for(self, worker: int, station: int) -> float:
        last_station = self.last_station_by_worker[worker]
        if last_station < 0:
            return 0.0
        return self.change_time[last_station][station]

    def _least_skilled(self, workers: List[int]) -> int:
        candidates = min_items(workers, key=lambda w: len(self.workforce.skills_by_worker(w)))
        return sample_random(candidates, self.rng)

    def _request_exact(self, chosen: int) -> simpy.events.Event:
        return self.pool.request(lambda worker: worker == chosen)

