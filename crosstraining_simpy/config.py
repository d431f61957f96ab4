"""
Configuración de una corrida de simulación.

Los valores por defecto son los de la corrida de referencia: fuerza laboral
totalmente flexible de 46 trabajadores, FCFS, utilización objetivo 0.95.
Puede cargarse desde un diccionario o un archivo JSON, por ejemplo:

    {
        "utilization_target": 0.9,
        "dispatch": "MLSF",
        "workforce": {"workers": 20, "fully_flexible": true}
    }
"""

import json
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional, Union

from .errors import ConfigurationError
from .layouts import FacilityLayout, Layouts
from .workforce import BinaryQualifiedWorkforce


@dataclass
class SimulationConfig:
    """Parámetros de una corrida (todos con valor de referencia)."""
    utilization_target: float = 0.95
    order_amount: float = 5.0
    processing_ratio_worker: float = 0.5
    change_time_ratio: float = 0.1
    line_change_factor: float = 2.0
    due_date_horizon_fix: float = 1.0
    due_date_horizon_var: float = 100.0
    cv_due_date: float = 0.0
    cv_processing_time: float = 0.25
    cv_interarrival: float = 1.0
    observation_time: float = 3600.0
    warmup_time: float = 600.0
    processing_time_stations: float = 1.0
    dispatch: str = "FCFS"
    seed: int = 0
    layout: Union[str, Dict[str, Any]] = "TWO_LINE"
    # Vector concatenado de calificaciones; si es None, fuerza laboral totalmente flexible
    workforce_vector: Optional[List[bool]] = None
    workers: int = 46

    def validate(self) -> "SimulationConfig":
        """
        Raises:
            ConfigurationError: Si algún parámetro está fuera de rango
        """
        if not 0 < self.utilization_target:
            raise ConfigurationError(f"utilization_target debe ser > 0: {self.utilization_target}")
        if not 0 < self.processing_ratio_worker <= 1:
            raise ConfigurationError(
                f"processing_ratio_worker debe estar en (0, 1]: {self.processing_ratio_worker}")
        for name in ("order_amount", "processing_time_stations"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} debe ser > 0: {getattr(self, name)}")
        for name in ("change_time_ratio", "line_change_factor", "due_date_horizon_fix",
                     "due_date_horizon_var", "cv_due_date", "cv_processing_time",
                     "cv_interarrival", "observation_time", "warmup_time"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} no puede ser negativo: {getattr(self, name)}")
        if self.workforce_vector is None and self.workers <= 0:
            raise ConfigurationError(f"workers debe ser > 0: {self.workers}")
        return self

    def build_layout(self) -> FacilityLayout:
        if isinstance(self.layout, dict):
            return FacilityLayout.from_dict(self.layout)
        return Layouts.load_layout(self.layout)

    def build_workforce(self, qualifications: int) -> BinaryQualifiedWorkforce:
        """Fuerza laboral para un layout con `qualifications` habilidades."""
        if self.workforce_vector is None:
            return BinaryQualifiedWorkforce.fully_flexible(self.workers, qualifications)
        return BinaryQualifiedWorkforce.from_vector(self.workforce_vector, qualifications)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationConfig":
        data = dict(data)
        known = {f.name for f in fields(cls)}

        workforce = data.pop("workforce", None)
        if isinstance(workforce, dict):
            if "vector" in workforce:
                if workforce.get("fully_flexible"):
                    raise ConfigurationError("workforce: 'vector' y 'fully_flexible' son excluyentes")
                data["workforce_vector"] = workforce["vector"]
            elif workforce.get("fully_flexible") or "workers" in workforce:
                data["workers"] = workforce.get("workers", cls.workers)
                data["workforce_vector"] = None
            else:
                raise ConfigurationError(
                    "workforce debe indicar 'vector' o 'workers' (con 'fully_flexible')")
        elif workforce is not None:
            data["workforce_vector"] = list(workforce)

        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Parámetros desconocidos: {', '.join(sorted(unknown))}")

        if data.get("workforce_vector") is not None:
            data["workforce_vector"] = [bool(q) for q in data["workforce_vector"]]
        return cls(**data).validate()

    @classmethod
    def from_json(cls, path: str) -> "SimulationConfig":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))
