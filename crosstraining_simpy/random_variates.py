"""
Generación de variables aleatorias y muestreo para desempates.

Incluye:
  - Normal por razón de uniformes (reproducible dado el mismo flujo uniforme)
  - Log-normal parametrizada por media y dispersión
  - Cuatro flujos independientes derivados de una semilla base
  - Selección de mínimos y muestreo uniforme en línea (reservoir)
"""

import math
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, TypeVar

import numpy as np

T = TypeVar("T")

NORMAL_MAGIC_CONST = 4 * math.exp(-0.5) / math.sqrt(2.0)

# Desplazamientos fijos sobre la semilla base
DEMAND_OFFSET = 0
DUE_DATE_OFFSET = 1
PROCESSING_OFFSET = 2
TIE_BREAK_OFFSET = 3


@dataclass
class RandomStreams:
    """Flujos aleatorios independientes de una corrida."""
    seed: int = 0
    demand: np.random.Generator = field(init=False)
    due_date: np.random.Generator = field(init=False)
    processing: np.random.Generator = field(init=False)
    tie_break: np.random.Generator = field(init=False)

    def __post_init__(self):
        self.demand = np.random.default_rng(self.seed + DEMAND_OFFSET)
        self.due_date = np.random.default_rng(self.seed + DUE_DATE_OFFSET)
        self.processing = np.random.default_rng(self.seed + PROCESSING_OFFSET)
        self.tie_break = np.random.default_rng(self.seed + TIE_BREAK_OFFSET)


def normal(rng: np.random.Generator, mu: float, sigma: float) -> float:
    """
    Variable normal por el método de razón de uniformes (Kinderman-Monahan).

    Args:
        rng: Flujo aleatorio, `rng.random()` en [0, 1)
        mu: Media
        sigma: Desviación estándar

    Returns:
        mu + z * sigma
    """
    while True:
        u1 = rng.random()
        u2 = 1.0 - rng.random()
        z = NORMAL_MAGIC_CONST * (u1 - 0.5) / u2
        zz = z * z / 4.0
        if zz <= -math.log(u2):
            return mu + z * sigma


def lognormal(rng: np.random.Generator, mu: float, sigma: float) -> float:
    """
    Variable log-normal con media objetivo `mu` y dispersión `sigma`.

    Con sigma = 0 retorna exactamente `mu` (caso determinístico).
    Nota: alpha = sqrt(mu*sigma)/mu no es la conversión usual desde el
    coeficiente de variación; se mantiene para no alterar los resultados.
    """
    if sigma == 0 or mu == 0:
        return mu
    alpha = math.sqrt(mu * sigma) / mu
    sigma_ln = math.sqrt(math.log(1 + alpha * alpha))
    mu_ln = math.log(mu) - 0.5 * sigma_ln * sigma_ln
    return math.exp(normal(rng, mu_ln, sigma_ln))


def min_items(source: Iterable[T], key: Callable[[T], float]) -> List[T]:
    """
    Todos los elementos cuyo valor `key` es mínimo. O(N).

    Returns:
        Lista (vacía si la secuencia está vacía)
    """
    result: List[T] = []
    current_min = None
    for item in source:
        value = key(item)
        if current_min is None or value < current_min:
            result = [item]
            current_min = value
        elif value == current_min:
            result.append(item)
    return result


def sample_random(source: Iterable[T], rng: np.random.Generator) -> T:
    """
    Elige un elemento con igual probabilidad (reservoir de tamaño 1).

    El k-ésimo candidato reemplaza al elegido si k * U < 1. Con un solo
    candidato no se consume ningún número aleatorio.

    Raises:
        ValueError: Si la secuencia está vacía
    """
    iterator = iter(source)
    try:
        selected = next(iterator)
    except StopIteration:
        raise ValueError("La secuencia está vacía")

    counter = 1
    for item in iterator:
        counter += 1
        if counter * rng.random() < 1.0:
            selected = item
    return selected
