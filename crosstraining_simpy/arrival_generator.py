"""
MÓDULO: Generador de Demanda

Simula la llegada de órdenes para una ruta (producto) fija durante la simulación.

Características:
  - Tiempos entre llegadas log-normales (flujo de demanda)
  - Fecha de entrega = llegada + horizonte fijo + horizonte variable log-normal
    (flujo de fechas de entrega)
  - Callback para notificar cada llegada
  - Integración con SimPy
"""

import itertools
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional

import numpy as np
import simpy

from .random_variates import lognormal


@dataclass
class JobSpec:
    """Una orden de producción."""
    job_id: int
    route: List[int]
    arrival_time: float
    due_date: float
    completion_time: Optional[float] = None
    backordered: bool = field(default=False)


class DemandGenerator:
    """Genera órdenes para una ruta con llegadas estocásticas."""

    def __init__(self, env: simpy.Environment,
                 route: List[int],
                 interarrival_mean: float,
                 cv_interarrival: float,
                 due_date_horizon_fix: float,
                 due_date_horizon_var: float,
                 cv_due_date: float,
                 rand_demand: np.random.Generator,
                 rand_due_date: np.random.Generator,
                 job_ids: Optional[Iterator[int]] = None):
        """
        Args:
            env: Entorno SimPy
            route: Secuencia de estaciones del producto
            interarrival_mean: Media del tiempo entre llegadas
            cv_interarrival: Dispersión del tiempo entre llegadas
            due_date_horizon_fix: Holgura fija de la fecha de entrega
            due_date_horizon_var: Media de la holgura variable
            cv_due_date: Dispersión de la holgura variable
            rand_demand: Flujo aleatorio de llegadas
            rand_due_date: Flujo aleatorio de fechas de entrega
            job_ids: Contador compartido de IDs (para IDs únicos entre rutas)
        """
        self.env = env
        self.route = list(route)
        self.interarrival_mean = interarrival_mean
        self.cv_interarrival = cv_interarrival
        self.due_date_horizon_fix = due_date_horizon_fix
        self.due_date_horizon_var = due_date_horizon_var
        self.cv_due_date = cv_due_date
        self.rand_demand = rand_demand
        self.rand_due_date = rand_due_date
        self.job_ids = job_ids if job_ids is not None else itertools.count(1)

        self.jobs_generated = 0
        self.arrival_callback: Optional[Callable[[JobSpec], None]] = None
        self.process: Optional[simpy.Process] = None

    def set_arrival_callback(self, callback: Callable[[JobSpec], None]):
        """Registra callback para ser llamado cuando llega una orden."""
        self.arrival_callback = callback

    def next_interarrival(self) -> float:
        return lognormal(self.rand_demand, self.interarrival_mean, self.cv_interarrival)

    def calculate_due_date(self, arrival_time: float) -> float:
        """Due date = llegada + horizonte fijo + horizonte variable."""
        return (arrival_time + self.due_date_horizon_fix
                + lognormal(self.rand_due_date, self.due_date_horizon_var, self.cv_due_date))

    def arrival_process(self):
        """Proceso SimPy que genera las órdenes de la ruta."""
        while True:
            yield self.env.timeout(self.next_interarrival())

            arrival_time = self.env.now
            job = JobSpec(
                job_id=next(self.job_ids),
                route=self.route,
                arrival_time=arrival_time,
                due_date=self.calculate_due_date(arrival_time),
            )
            self.jobs_generated += 1

            if self.arrival_callback:
                self.arrival_callback(job)

    def start(self) -> simpy.Process:
        """Inicia el proceso de generación de llegadas."""
        self.process = self.env.process(self.arrival_process())
        return self.process
