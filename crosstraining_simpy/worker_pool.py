"""
Pool de trabajadores con solicitudes por predicado, sobre simpy.FilterStore.

Una solicitud se concede al primer trabajador libre que cumple el predicado;
si ninguno lo cumple queda en cola hasta que se libere uno. Entre solicitudes
igualmente elegibles se atiende primero la más antigua.
"""

from typing import Callable, Iterable, List

import simpy

Predicate = Callable[[int], bool]


class WorkerPool:
    """Conjunto fijo de trabajadores (índices) compartido por todos los flujos."""

    def __init__(self, env: simpy.Environment, workers: Iterable[int]):
        """
        Args:
            env: Entorno SimPy
            workers: Índices de los trabajadores
        """
        self.env = env
        self.store = simpy.FilterStore(env)
        self.store.items.extend(workers)

    @property
    def idle_workers(self) -> List[int]:
        return list(self.store.items)

    def request(self, predicate: Predicate) -> simpy.events.Event:
        """Evento que se dispara con el índice del trabajador concedido."""
        return self.store.get(predicate)

    def is_available(self, predicate: Predicate) -> bool:
        """Consulta sin bloqueo: ¿hay algún trabajador libre que cumpla?"""
        return any(predicate(w) for w in self.store.items)

    def release(self, worker: int) -> simpy.events.Event:
        """Devuelve el trabajador al pool (atiende solicitudes pendientes)."""
        return self.store.put(worker)
