"""
Cross-Training SimPy - Planta de dos líneas con trabajadores polivalentes
=========================================================================

Simulación de eventos discretos con SimPy para estudiar cómo el entrenamiento
cruzado de los trabajadores afecta throughput, service level y tardanza.

Componentes:
  - workforce.py: Matriz de calificaciones trabajador x habilidad
  - random_variates.py: Variables normales / log-normales y desempates
  - metrics.py: Estadísticas en línea (por muestras y ponderadas por tiempo)
  - dispatching.py: Reglas de despacho de trabajadores (FCFS, LSF, MLSF)
  - layouts.py: Layouts de planta (estaciones, líneas, rutas)
  - simulator.py: Simulador principal
"""

__version__ = "1.0.0"
__author__ = "JOVILCHESC"
__description__ = "Cross-training simulator - Two-line manufacturing facility"

from .errors import ConfigurationError
from .workforce import BinaryQualifiedWorkforce
from .random_variates import RandomStreams, normal, lognormal, min_items, sample_random
from .metrics import BasicStatistics, TimeBasedStatistics, SimulationMetrics
from .worker_pool import WorkerPool
from .dispatching import DispatchStrategy, WorkerDispatcher
from .layouts import FacilityLayout, Layouts
from .arrival_generator import DemandGenerator, JobSpec
from .event_manager import EventManager, EventType
from .config import SimulationConfig
from .simulator import CrossTrainingSimulator

__all__ = [
    "ConfigurationError",
    "BinaryQualifiedWorkforce",
    "RandomStreams",
    "normal",
    "lognormal",
    "min_items",
    "sample_random",
    "BasicStatistics",
    "TimeBasedStatistics",
    "SimulationMetrics",
    "WorkerPool",
    "DispatchStrategy",
    "WorkerDispatcher",
    "FacilityLayout",
    "Layouts",
    "DemandGenerator",
    "JobSpec",
    "EventManager",
    "EventType",
    "SimulationConfig",
    "CrossTrainingSimulator",
]
