"""
MÓDULO: Gestor de Eventos

Registro centralizado de los eventos del ciclo de vida de las órdenes:
  - Llegadas de órdenes
  - Cambios de estación de trabajadores (changeover)
  - Inicio/fin de operaciones
  - Órdenes atrasadas (backorders), completadas y entregadas

Características:
  - Log estructurado con timestamps simulados
  - Exportación a CSV
  - Consultas por orden, estación o trabajador
"""

import csv
import os
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class EventType(Enum):
    """Tipos de eventos en la simulación."""
    ARRIVAL = "arrival"         # Llegada de orden
    CHANGEOVER = "changeover"   # Trabajador cambia de estación
    START = "start"             # Inicio de operación
    END = "end"                 # Fin de operación
    BACKORDER = "backorder"     # Vence la fecha de entrega antes de terminar
    COMPLETE = "complete"       # Orden terminada (sale de WIP)
    DELIVERED = "delivered"     # Orden entregada (sale de FGI)


@dataclass
class SimulationEvent:
    """Representación de un evento en la simulación."""
    time: float
    event_type: str
    job_id: Optional[int] = None
    station_id: Optional[int] = None
    worker_id: Optional[int] = None
    duration: Optional[float] = None
    additional_info: Optional[Dict] = None

    def to_dict(self) -> Dict:
        """Convierte evento a diccionario."""
        data = asdict(self)
        if data['additional_info']:
            data['additional_info'] = str(data['additional_info'])
        return data


class EventManager:
    """Gestor centralizado de eventos de simulación."""

    FIELDNAMES = ['time', 'event_type', 'job_id', 'station_id', 'worker_id',
                  'duration', 'additional_info']

    def __init__(self, output_dir: str = "logs"):
        """
        Args:
            output_dir: Directorio para guardar logs (se crea al exportar)
        """
        self.events: List[SimulationEvent] = []
        self.output_dir = output_dir

    def log_event(self, event: SimulationEvent):
        self.events.append(event)

    def arrival_event(self, time: float, job_id: int, due_date: float, route: List[int]):
        """Registra llegada de orden."""
        self.log_event(SimulationEvent(
            time=time,
            event_type=EventType.ARRIVAL.value,
            job_id=job_id,
            additional_info={"due_date": due_date, "route": list(route)}
        ))

    def changeover(self, time: float, job_id: int, station_id: int, worker_id: int,
                   from_station: int, duration: float):
        """Registra el cambio de estación de un trabajador."""
        self.log_event(SimulationEvent(
            time=time,
            event_type=EventType.CHANGEOVER.value,
            job_id=job_id,
            station_id=station_id,
            worker_id=worker_id,
            duration=duration,
            additional_info={"from_station": from_station}
        ))

    def operation_start(self, time: float, job_id: int, station_id: int, worker_id: int,
                        duration: float, backlog: float = 0):
        """Registra inicio de operación."""
        self.log_event(SimulationEvent(
            time=time,
            event_type=EventType.START.value,
            job_id=job_id,
            station_id=station_id,
            worker_id=worker_id,
            duration=duration,
            additional_info={"backlog": backlog}
        ))

    def operation_end(self, time: float, job_id: int, station_id: int):
        """Registra fin de operación."""
        self.log_event(SimulationEvent(
            time=time,
            event_type=EventType.END.value,
            job_id=job_id,
            station_id=station_id
        ))

    def backorder(self, time: float, job_id: int, due_date: float):
        """Registra una orden atrasada."""
        self.log_event(SimulationEvent(
            time=time,
            event_type=EventType.BACKORDER.value,
            job_id=job_id,
            additional_info={"due_date": due_date}
        ))

    def job_complete(self, time: float, job_id: int, lead_time: float, tardiness: float):
        """Registra completación de trabajo."""
        self.log_event(SimulationEvent(
            time=time,
            event_type=EventType.COMPLETE.value,
            job_id=job_id,
            duration=lead_time,
            additional_info={"tardiness": tardiness}
        ))

    def job_delivered(self, time: float, job_id: int, fgi_time: float):
        """Registra la entrega de una orden."""
        self.log_event(SimulationEvent(
            time=time,
            event_type=EventType.DELIVERED.value,
            job_id=job_id,
            duration=fgi_time
        ))

    def export_to_csv(self, filename: str = "simulation_log") -> str:
        """
        Exporta eventos a archivo CSV.

        Args:
            filename: Nombre del archivo (sin extensión)
        """
        os.makedirs(self.output_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = os.path.join(self.output_dir, f"{filename}_{timestamp}.csv")

        if not self.events:
            print(f"[WARNING] No hay eventos para exportar")
            return filepath

        rows = [event.to_dict() for event in self.events]
        with open(filepath, 'w', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=self.FIELDNAMES)
            writer.writeheader()
            writer.writerows(rows)

        print(f"[OK] Log exportado: {filepath}")
        return filepath

    def get_event_summary(self) -> Dict[str, Any]:
        """Retorna resumen de eventos."""
        event_counts: Dict[str, int] = {}
        for event in self.events:
            event_counts[event.event_type] = event_counts.get(event.event_type, 0) + 1

        return {
            'total_events': len(self.events),
            'event_counts': event_counts,
            'simulation_time': self.events[-1].time if self.events else 0,
            'unique_jobs': len({e.job_id for e in self.events if e.job_id is not None}),
            'stations_involved': len({e.station_id for e in self.events if e.station_id is not None}),
            'workers_involved': len({e.worker_id for e in self.events if e.worker_id is not None}),
        }

    def print_event_summary(self):
        """Imprime resumen de eventos."""
        summary = self.get_event_summary()

        print("\n" + "="*70)
        print("[RESUMEN DE EVENTOS DE SIMULACION]")
        print("="*70)
        print(f"Total de eventos registrados: {summary['total_events']}")
        print(f"Tiempo de simulacion: {summary['simulation_time']:.2f} u.t.")
        print(f"Ordenes procesadas: {summary['unique_jobs']}")
        print(f"Estaciones involucradas: {summary['stations_involved']}")
        print(f"Trabajadores involucrados: {summary['workers_involved']}")
        print("\nDesglose por tipo de evento:")

        for event_type in EventType:
            count = summary['event_counts'].get(event_type.value)
            if count:
                print(f"  - {event_type.value:15s}: {count:6d} eventos")

        print("="*70 + "\n")

    def get_events_by_type(self, event_type: str) -> List[SimulationEvent]:
        return [e for e in self.events if e.event_type == event_type]

    def get_events_by_job(self, job_id: int) -> List[SimulationEvent]:
        return [e for e in self.events if e.job_id == job_id]

    def get_events_by_station(self, station_id: int) -> List[SimulationEvent]:
        return [e for e in self.events if e.station_id == station_id]

    def get_events_by_worker(self, worker_id: int) -> List[SimulationEvent]:
        return [e for e in self.events if e.worker_id == worker_id]

    def reset(self):
        self.events = []
