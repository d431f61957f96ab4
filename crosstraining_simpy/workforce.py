"""
MÓDULO: Modelo de Calificaciones de la Fuerza Laboral

Matriz binaria trabajadores x habilidades (skills). Responde consultas de
calificación y agrupa trabajadores por habilidad y habilidades por trabajador.

Características:
  - Construcción desde vector concatenado o desde matriz (filas = trabajadores)
  - Vistas agrupadas precalculadas una sola vez (O(W·Q))
  - Consultas puras, O(1)
"""

from typing import Iterable, List, Sequence, Tuple

from .errors import ConfigurationError


class BinaryQualifiedWorkforce:
    """Fuerza laboral con calificación binaria (calificado / no calificado)."""

    def __init__(self, vec: Iterable[bool], qualifications: int):
        """
        Args:
            vec: Vector de calificaciones, resultado de concatenar las
                 calificaciones de cada trabajador
            qualifications: Número de habilidades (para saber dónde empieza
                            cada trabajador en el vector)
        """
        if qualifications <= 0:
            raise ConfigurationError(f"El número de habilidades debe ser positivo: {qualifications}")

        self._enc = [bool(x) for x in vec]
        if len(self._enc) % qualifications > 0:
            raise ConfigurationError(
                f"El número de trabajadores no es entero: largo del vector {len(self._enc)} "
                f"no es múltiplo de {qualifications} habilidades"
            )

        self._qualifications = qualifications

        # Vistas agrupadas (inmutables)
        self._qualification_by_worker: List[Tuple[int, ...]] = [
            tuple(q for q in range(qualifications) if self._enc[w * qualifications + q])
            for w in range(self.workers)
        ]
        self._workers_by_qualification: List[Tuple[int, ...]] = [
            tuple(w for w in range(self.workers) if self._enc[w * qualifications + q])
            for q in range(qualifications)
        ]

    @classmethod
    def from_vector(cls, vec: Iterable[bool], qualifications: int) -> "BinaryQualifiedWorkforce":
        """Crea la matriz de calificaciones a partir de un vector concatenado."""
        return cls(vec, qualifications)

    @classmethod
    def from_matrix(cls, matrix: Sequence[Sequence[bool]]) -> "BinaryQualifiedWorkforce":
        """
        Crea la matriz de calificaciones a partir de filas por trabajador.

        Args:
            matrix: Filas = trabajadores, columnas = habilidades
        """
        if not matrix:
            raise ConfigurationError("La matriz de calificaciones está vacía")
        qualifications = len(matrix[0])
        for row in matrix:
            if len(row) != qualifications:
                raise ConfigurationError("Todas las filas de la matriz deben tener el mismo largo")
        return cls([q for row in matrix for q in row], qualifications)

    @classmethod
    def fully_flexible(cls, workers: int, qualifications: int) -> "BinaryQualifiedWorkforce":
        """Todos los trabajadores calificados en todas las habilidades."""
        return cls([True] * (workers * qualifications), qualifications)

    @property
    def qualifications(self) -> int:
        return self._qualifications

    @property
    def workers(self) -> int:
        return len(self._enc) // self._qualifications

    def _index(self, worker: int, qualification: int) -> int:
        if not (0 <= worker < self.workers) or not (0 <= qualification < self._qualifications):
            raise IndexError(
                f"Trabajador {worker} / habilidad {qualification} fuera de rango "
                f"({self.workers} x {self._qualifications})"
            )
        return worker * self._qualifications + qualification

    def is_qualified(self, worker: int, qualification: int) -> bool:
        return self._enc[self._index(worker, qualification)]

    def qualification_level(self, worker: int, qualification: int) -> float:
        """Nivel de calificación: 0 o 1 en el modelo binario."""
        return 1.0 if self._enc[self._index(worker, qualification)] else 0.0

    def workers_by_skill(self, qualification: int) -> Tuple[int, ...]:
        if not 0 <= qualification < self._qualifications:
            raise IndexError(f"Habilidad {qualification} fuera de rango ({self._qualifications})")
        return self._workers_by_qualification[qualification]

    def skills_by_worker(self, worker: int) -> Tuple[int, ...]:
        if not 0 <= worker < self.workers:
            raise IndexError(f"Trabajador {worker} fuera de rango ({self.workers})")
        return self._qualification_by_worker[worker]

    def get_workers_by_qualification(self) -> List[List[int]]:
        return [list(ws) for ws in self._workers_by_qualification]

    def get_qualification_by_worker(self) -> List[List[int]]:
        return [list(qs) for qs in self._qualification_by_worker]

    def total_qualifications(self) -> int:
        """Cantidad total de calificaciones (entradas verdaderas de la matriz)."""
        return sum(self._enc)

    def __repr__(self) -> str:
        return (f"BinaryQualifiedWorkforce(workers={self.workers}, "
                f"qualifications={self._qualifications}, total={self.total_qualifications()})")
