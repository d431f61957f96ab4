"""
Configuraciones de planta (layouts): estaciones, líneas, habilidades y rutas.
Incluye: la planta de referencia de dos líneas y una línea serial simple.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence

from .errors import ConfigurationError


@dataclass
class FacilityLayout:
    """Estaciones de la planta y rutas de los productos."""
    nominal_capacity: List[int]          # Máquinas nominales por estación
    qualification_by_station: List[int]  # Habilidad requerida por estación
    line_by_station: List[int]           # Línea a la que pertenece cada estación
    routes: List[List[int]]              # Secuencia de estaciones por producto
    name: str = ""

    def __post_init__(self):
        n = len(self.nominal_capacity)
        if n == 0:
            raise ConfigurationError("El layout no tiene estaciones")
        if len(self.qualification_by_station) != n or len(self.line_by_station) != n:
            raise ConfigurationError("capacidad, habilidad y línea deben tener un valor por estación")
        if any(q < 0 for q in self.qualification_by_station):
            raise ConfigurationError(f"Habilidad negativa en el layout: {self.qualification_by_station}")
        if not self.routes:
            raise ConfigurationError("El layout no tiene rutas")
        lengths = {len(r) for r in self.routes}
        if len(lengths) != 1 or 0 in lengths:
            raise ConfigurationError("Todas las rutas deben tener el mismo largo (> 0)")
        for route in self.routes:
            for station in route:
                if not 0 <= station < n:
                    raise ConfigurationError(f"Estación {station} fuera de rango en ruta {route}")

    @property
    def num_stations(self) -> int:
        return len(self.nominal_capacity)

    @property
    def num_qualifications(self) -> int:
        return max(self.qualification_by_station) + 1

    def capacities(self, processing_ratio_worker: float) -> List[int]:
        """
        Capacidad efectiva: nominal / ratio de procesamiento del trabajador,
        redondeada (mitad al par) y con mínimo de 1.
        """
        return [max(int(round(c / processing_ratio_worker)), 1) for c in self.nominal_capacity]

    def change_time_matrix(self, change_time: float, line_change_time: float) -> List[List[float]]:
        """
        Matriz simétrica de tiempos de cambio.

        Cero en la diagonal y entre estaciones de la misma línea con la misma
        habilidad; `change_time` dentro de la línea; `line_change_time` entre líneas.
        """
        matrix = []
        for i in range(self.num_stations):
            row = []
            for j in range(self.num_stations):
                if self.line_by_station[i] != self.line_by_station[j]:
                    row.append(line_change_time)
                elif i == j or self.qualification_by_station[i] == self.qualification_by_station[j]:
                    row.append(0.0)
                else:
                    row.append(change_time)
            matrix.append(row)
        return matrix

    def routes_sharing_first_station(self, route: Sequence[int]) -> int:
        """Cantidad de rutas que comparten la primera estación de `route`."""
        return sum(1 for r in self.routes if r[0] == route[0])

    @classmethod
    def from_dict(cls, data: Dict) -> "FacilityLayout":
        try:
            return cls(
                nominal_capacity=[int(c) for c in data["nominal_capacity"]],
                qualification_by_station=[int(q) for q in data["qualification_by_station"]],
                line_by_station=[int(l) for l in data.get("line_by_station", [0] * len(data["nominal_capacity"]))],
                routes=[[int(s) for s in r] for r in data["routes"]],
                name=data.get("name", "CUSTOM"),
            )
        except KeyError as e:
            raise ConfigurationError(f"Falta el campo {e} en el layout") from e


class Layouts:
    """Layouts de planta predefinidos."""

    @staticmethod
    def load_two_line() -> FacilityLayout:
        """
        Planta de referencia: 2 líneas x 2 productos x 3 estaciones.

                              S2 => Producto 1
            Línea 1: S0 - S1 <
                              S3 => Producto 2

                              S6 => Producto 3
            Línea 2: S4 - S5 <
                              S7 => Producto 4
        """
        return FacilityLayout(
            nominal_capacity=[8, 8, 4, 4, 8, 8, 4, 4],
            qualification_by_station=[0, 1, 2, 2, 3, 4, 5, 5],
            line_by_station=[0, 0, 0, 0, 1, 1, 1, 1],
            routes=[[0, 1, 2], [0, 1, 3], [4, 5, 6], [4, 5, 7]],
            name="TWO_LINE",
        )

    @staticmethod
    def load_serial_line(stations: int = 3, capacity: int = 1) -> FacilityLayout:
        """Una sola línea serial, una habilidad por estación, un producto."""
        return FacilityLayout(
            nominal_capacity=[capacity] * stations,
            qualification_by_station=list(range(stations)),
            line_by_station=[0] * stations,
            routes=[list(range(stations))],
            name="SERIAL_LINE",
        )

    @staticmethod
    def get_available_layouts() -> Dict[str, str]:
        """Retorna un diccionario de layouts disponibles con descripciones."""
        return {
            "TWO_LINE": "2 líneas x 2 productos x 3 estaciones (referencia)",
            "SERIAL_LINE": "1 línea serial de 3 estaciones",
        }

    @staticmethod
    def load_layout(layout_name: str) -> FacilityLayout:
        """
        Carga un layout por su nombre.

        Raises:
            ConfigurationError: Si el layout no existe
        """
        name = str(layout_name).upper()
        if name == "TWO_LINE":
            return Layouts.load_two_line()
        elif name == "SERIAL_LINE":
            return Layouts.load_serial_line()
        available = ", ".join(Layouts.get_available_layouts().keys())
        raise ConfigurationError(
            f"Layout '{layout_name}' no encontrado. Layouts disponibles: {available}"
        )

    @staticmethod
    def print_layout_info(layout: FacilityLayout, processing_ratio_worker: float = 1.0):
        """Imprime información sobre un layout."""
        capacities = layout.capacities(processing_ratio_worker)
        print(f"\n{'='*70}")
        print(f"[LAYOUT] {layout.name or 'Información'}")
        print(f"{'='*70}")
        print(f"Número de estaciones:     {layout.num_stations}")
        print(f"Número de habilidades:    {layout.num_qualifications}")
        print(f"Número de rutas:          {len(layout.routes)}")
        for s in range(layout.num_stations):
            print(f"   Estación {s}: línea {layout.line_by_station[s]}, "
                  f"habilidad {layout.qualification_by_station[s]}, capacidad {capacities[s]}")
        for idx, route in enumerate(layout.routes):
            print(f"   Ruta {idx}: {' -> '.join(f'S{s}' for s in route)}")
        print(f"{'='*70}\n")
