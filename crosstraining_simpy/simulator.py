"""
SIMULADOR DE ENTRENAMIENTO CRUZADO (CROSS-TRAINING) EN UNA PLANTA DE DOS LÍNEAS

Simulador de flujo con recursos compartidos que incorpora:
  - Demanda estocástica por producto (una ruta por producto)
  - Estaciones con capacidad limitada y trabajadores con calificaciones
  - Despacho de trabajadores (FCFS, LSF, MLSF) y tiempos de cambio
  - Fechas de entrega, inventario de producto terminado y backorders
  - Estadísticas en línea con periodo de calentamiento
"""

import argparse
import itertools
import os
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import pandas as pd
import simpy

from .arrival_generator import DemandGenerator, JobSpec
from .config import SimulationConfig
from .dispatching import WorkerDispatcher
from .errors import ConfigurationError
from .event_manager import EventManager
from .layouts import FacilityLayout, Layouts
from .metrics import BasicStatistics, SimulationMetrics, TimeBasedStatistics
from .random_variates import RandomStreams, lognormal
from .worker_pool import WorkerPool
from .workforce import BinaryQualifiedWorkforce


class CrossTrainingSimulator:
    """Modelo de la planta: estaciones, trabajadores, órdenes y estadísticas."""

    def __init__(self, config: SimulationConfig,
                 workforce: Optional[BinaryQualifiedWorkforce] = None,
                 layout: Optional[FacilityLayout] = None,
                 env: Optional[simpy.Environment] = None,
                 verbose: bool = False,
                 trace: bool = False,
                 output_dir: str = "logs"):
        """
        Args:
            config: Parámetros de la corrida
            workforce: Matriz de calificaciones (si es None se construye desde config)
            layout: Layout de planta (si es None se construye desde config)
            env: Entorno SimPy (si es None se crea uno nuevo)
            verbose: Si True, imprime llegadas y backorders
            trace: Si True, registra eventos en el EventManager
            output_dir: Directorio para exportar resultados
        """
        self.config = config.validate()
        self.env = env if env is not None else simpy.Environment()
        self.verbose = verbose
        self.output_dir = output_dir

        self.layout = layout if layout is not None else config.build_layout()
        self.workforce = workforce if workforce is not None else config.build_workforce(
            self.layout.num_qualifications)
        if self.workforce.qualifications < self.layout.num_qualifications:
            raise ConfigurationError(
                f"La fuerza laboral tiene {self.workforce.qualifications} habilidades, "
                f"el layout requiere {self.layout.num_qualifications}"
            )

        self.streams = RandomStreams(config.seed)

        # Configuración del sistema
        self.processing_time_stations = config.processing_time_stations
        self.capacity: List[int] = self.layout.capacities(config.processing_ratio_worker)
        self.qualification_by_station = list(self.layout.qualification_by_station)
        change_time = config.change_time_ratio * config.processing_ratio_worker * self.processing_time_stations
        self.change_time = self.layout.change_time_matrix(change_time, change_time * config.line_change_factor)

        # Entidades dinámicas
        num_workers = self.workforce.workers
        self.pool = WorkerPool(self.env, range(num_workers))
        self.stations = [simpy.Resource(self.env, capacity=c) for c in self.capacity]
        self.last_station_by_worker: List[int] = [-1] * num_workers
        self.active_stations: List[int] = [0] * len(self.capacity)
        self.active_workers = 0

        self.dispatcher = WorkerDispatcher(
            pool=self.pool,
            workforce=self.workforce,
            qualification_by_station=self.qualification_by_station,
            change_time=self.change_time,
            last_station_by_worker=self.last_station_by_worker,
            strategy=config.dispatch,
            rng=self.streams.tie_break,
        )

        # Estadísticas
        self.backlog = [TimeBasedStatistics(self.env) for _ in self.stations]
        self.system_utilization = TimeBasedStatistics(self.env)
        self.station_utilization = [TimeBasedStatistics(self.env) for _ in self.stations]
        self.wip_inventory = TimeBasedStatistics(self.env)
        self.fgi_inventory = TimeBasedStatistics(self.env)
        self.worker_utilization = TimeBasedStatistics(self.env)
        self.worker_utilizations = [TimeBasedStatistics(self.env) for _ in range(num_workers)]
        self.backorders = TimeBasedStatistics(self.env)
        self.wip_lead_time = BasicStatistics()
        self.fgi_lead_time = BasicStatistics()
        self.tardiness = BasicStatistics()
        self.service_level = BasicStatistics()

        # Órdenes atrasadas aún en proceso: flujo -> (llegada, fecha de entrega)
        self.backordered_jobs: Dict[simpy.Process, Tuple[float, float]] = {}
        self.jobs_completed: List[Dict] = []

        self.event_manager = EventManager(output_dir) if trace else None
        self.job_ids = itertools.count(1)
        self.generators: List[DemandGenerator] = []
        self._finalized = False

    # ------------------------------------------------------------------
    # Orquestación de la corrida
    # ------------------------------------------------------------------

    def interarrival_mean(self, route: List[int]) -> float:
        """
        Tiempo medio entre llegadas de una ruta para alcanzar la utilización
        objetivo en su primera estación (compartida con las otras rutas que
        empiezan en ella).
        """
        sharing = self.layout.routes_sharing_first_station(route)
        return ((sharing * self.config.order_amount * self.processing_time_stations)
                / (self.config.utilization_target * self.capacity[route[0]]))

    def start_demand(self) -> List[DemandGenerator]:
        """Inicia un generador de demanda por ruta del layout."""
        for route in self.layout.routes:
            generator = DemandGenerator(
                self.env,
                route=route,
                interarrival_mean=self.interarrival_mean(route),
                cv_interarrival=self.config.cv_interarrival,
                due_date_horizon_fix=self.config.due_date_horizon_fix,
                due_date_horizon_var=self.config.due_date_horizon_var,
                cv_due_date=self.config.cv_due_date,
                rand_demand=self.streams.demand,
                rand_due_date=self.streams.due_date,
                job_ids=self.job_ids,
            )
            generator.set_arrival_callback(self._on_job_arrival)
            generator.start()
            self.generators.append(generator)
        return self.generators

    def run(self) -> Dict[str, float]:
        """
        Ejecuta la corrida: calentamiento + observación.

        Returns:
            Resumen de métricas (ver `summary`)
        """
        if self.generators:
            raise RuntimeError("La simulación ya fue ejecutada")

        if self.verbose:
            print("\n" + "="*80)
            print("[INICIANDO SIMULACION]")
            print(f"   Estaciones: {len(self.stations)} (capacidades {self.capacity})")
            print(f"   Trabajadores: {self.workforce.workers} "
                  f"(calificaciones: {self.workforce.total_qualifications()})")
            print(f"   Regla despacho: {self.dispatcher.description}")
            print(f"   Tiempo simulacion: {self.config.observation_time:.1f} u.t. "
                  f"(Warmup: {self.config.warmup_time:.1f})")
            print("="*80 + "\n")

        self.env.process(self.end_warmup_phase(self.config.warmup_time))
        self.start_demand()
        self.env.run(until=self.config.warmup_time + self.config.observation_time)
        self.finalize()

        if self.verbose:
            self.print_summary()
        return self.summary()

    def end_warmup_phase(self, time: float):
        """Al terminar el calentamiento descarta las estadísticas transitorias."""
        yield self.env.timeout(time)
        self.reset_statistics()

    def reset_statistics(self):
        """Reinicia los colectores conservando el nivel actual de cada indicador."""
        for stat in self._time_based():
            stat.reset(stat.current)
        for stat in (self.wip_lead_time, self.fgi_lead_time, self.tardiness, self.service_level):
            stat.reset()
        self.jobs_completed = []

    def finalize(self):
        """Incorpora las órdenes atrasadas que siguen en proceso al final de la corrida."""
        if self._finalized:
            return
        now = self.env.now
        for arrival, due in self.backordered_jobs.values():
            self.service_level.add(0)
            self.wip_lead_time.add(now - arrival)
            self.tardiness.add(now - due)
        self._finalized = True

    # ------------------------------------------------------------------
    # Ciclo de vida de una orden
    # ------------------------------------------------------------------

    def submit_job(self, route: List[int], due_date: float) -> Tuple[JobSpec, simpy.Process]:
        """Crea una orden que llega ahora con la fecha de entrega dada."""
        job = JobSpec(job_id=next(self.job_ids), route=list(route),
                      arrival_time=self.env.now, due_date=due_date)
        return job, self._on_job_arrival(job)

    def _on_job_arrival(self, job: JobSpec) -> simpy.Process:
        """Callback cuando llega una nueva orden."""
        if self.event_manager:
            self.event_manager.arrival_event(self.env.now, job.job_id, job.due_date, job.route)
        if self.verbose:
            print(f"[{self.env.now:8.1f}] [ARRIVAL] Job {job.job_id:5d} LLEGA "
                  f"(Ruta: {job.route}, Due date: {job.due_date:.1f})")
        return self.env.process(self.job_process(job))

    def job_process(self, job: JobSpec):
        """Orden: flujo por la ruta en carrera contra la fecha de entrega."""
        start = job.arrival_time
        flow = self.env.process(self.job_flow(job))
        yield flow | self.env.timeout(job.due_date - start)

        if flow.is_alive:
            # Vence la fecha de entrega antes de terminar
            job.backordered = True
            self.backorders.increase()
            self.backordered_jobs[flow] = (start, job.due_date)
            if self.event_manager:
                self.event_manager.backorder(self.env.now, job.job_id, job.due_date)
            if self.verbose:
                print(f"[{self.env.now:8.1f}] [LATE] Job {job.job_id:5d} en backorder")
            yield flow
            del self.backordered_jobs[flow]

        now = self.env.now
        job.completion_time = now
        lead_time = now - start
        tardiness = max(now - job.due_date, 0)
        self.wip_lead_time.add(lead_time)
        self.tardiness.add(tardiness)
        if self.event_manager:
            self.event_manager.job_complete(now, job.job_id, lead_time, tardiness)

        on_time = now < job.due_date
        fgi_delay = job.due_date - now if on_time else 0.0
        self.jobs_completed.append({
            "job_id": job.job_id,
            "route": "-".join(str(s) for s in job.route),
            "arrival_time": job.arrival_time,
            "due_date": job.due_date,
            "completion_time": now,
            "lead_time": lead_time,
            "tardiness": tardiness,
            "fgi_time": fgi_delay,
            "service_level": 1 if on_time else 0,
            "backordered": job.backordered,
        })

        if on_time:
            self.service_level.add(1)
            self.fgi_inventory.increase()
            yield self.env.timeout(fgi_delay)  # espera la fecha de entrega para despachar
            self.fgi_inventory.decrease()
            self.fgi_lead_time.add(fgi_delay)
        else:
            self.service_level.add(0)
            self.fgi_lead_time.add(0)
            if job.backordered:
                self.backorders.decrease()

        if self.event_manager:
            self.event_manager.job_delivered(self.env.now, job.job_id, fgi_delay)

    def job_flow(self, job: JobSpec):
        """Recorre la ruta de la orden estación por estación."""
        self.wip_inventory.increase()
        for station in job.route:
            self.backlog[station].increase()
            slot = self.stations[station].request()
            yield slot  # espera a que la estación tenga capacidad

            req = self.dispatcher.request_worker(station)
            worker = yield req  # espera al trabajador

            last_station = self.last_station_by_worker[worker]
            if last_station >= 0 and self.change_time[last_station][station] > 0:
                change = self.change_time[last_station][station]
                if self.event_manager:
                    self.event_manager.changeover(self.env.now, job.job_id, station, worker,
                                                  last_station, change)
                yield self.env.timeout(change)  # el trabajador cambia de estación
            self.last_station_by_worker[worker] = station
            self.active_stations[station] += 1
            self.active_workers += 1

            self._update_station_gauges(station)
            self.backlog[station].decrease()
            self.worker_utilization.update_to(self.active_workers / self.workforce.workers)
            self.worker_utilizations[worker].update_to(1)

            proc_time = lognormal(self.streams.processing,
                                  self.processing_time_stations * self.config.order_amount,
                                  self.config.cv_processing_time)
            worker_time = proc_time * self.config.processing_ratio_worker
            machine_time = proc_time - worker_time
            if self.event_manager:
                self.event_manager.operation_start(self.env.now, job.job_id, station, worker,
                                                   proc_time, self.backlog[station].current)

            yield self.env.timeout(worker_time)  # parte atendida por el trabajador
            yield self.pool.release(worker)
            self.active_workers -= 1
            self.worker_utilization.update_to(self.active_workers / self.workforce.workers)
            self.worker_utilizations[worker].update_to(0)

            yield self.env.timeout(machine_time)  # parte sólo de máquina
            yield self.stations[station].release(slot)
            self.active_stations[station] -= 1
            self._update_station_gauges(station)
            if self.event_manager:
                self.event_manager.operation_end(self.env.now, job.job_id, station)
        self.wip_inventory.decrease()

    def _update_station_gauges(self, station: int):
        self.system_utilization.update_to(sum(self.active_stations) / sum(self.capacity))
        self.station_utilization[station].update_to(self.active_stations[station] / self.capacity[station])

    # ------------------------------------------------------------------
    # Resultados
    # ------------------------------------------------------------------

    def _time_based(self) -> List[TimeBasedStatistics]:
        return (self.backlog + [self.system_utilization] + self.station_utilization
                + [self.wip_inventory, self.fgi_inventory, self.worker_utilization]
                + self.worker_utilizations + [self.backorders])

    def metrics(self) -> SimulationMetrics:
        return SimulationMetrics({
            "service_level": self.service_level,
            "tardiness": self.tardiness,
            "wip_lead_time": self.wip_lead_time,
            "fgi_lead_time": self.fgi_lead_time,
            "wip_inventory": self.wip_inventory,
            "fgi_inventory": self.fgi_inventory,
            "backorders": self.backorders,
            "system_utilization": self.system_utilization,
            "worker_utilization": self.worker_utilization,
            "backlog": self.backlog,
            "station_utilization": self.station_utilization,
            "worker_utilizations": self.worker_utilizations,
        })

    def summary(self) -> Dict[str, float]:
        """Medias de los indicadores principales."""
        return {
            "dispatch": self.dispatcher.strategy.value,
            "total_qualifications": self.workforce.total_qualifications(),
            "service_level": self.service_level.mean,
            "tardiness": self.tardiness.mean,
            "wip_lead_time": self.wip_lead_time.mean,
            "fgi_lead_time": self.fgi_lead_time.mean,
            "wip_inventory": self.wip_inventory.mean,
            "fgi_inventory": self.fgi_inventory.mean,
            "backorders": self.backorders.mean,
            "system_utilization": self.system_utilization.mean,
            "worker_utilization": self.worker_utilization.mean,
            "jobs_observed": self.service_level.count,
            "jobs_generated": sum(g.jobs_generated for g in self.generators),
        }

    def print_summary(self):
        """Imprime resumen de la simulación."""
        s = self.summary()
        print("\n" + "="*80)
        print("[RESUMEN DE SIMULACION]")
        print("="*80)

        if self.event_manager:
            self.event_manager.print_event_summary()

        print(f"[OK] Ordenes generadas: {s['jobs_generated']}")
        print(f"[OK] Ordenes observadas: {s['jobs_observed']}")
        print(f"   Service level: {s['service_level'] * 100:.2f}%")
        print(f"   Tardanza promedio: {s['tardiness']:.2f}")
        print(f"   Lead time WIP promedio: {s['wip_lead_time']:.2f}")
        print(f"   Lead time FGI promedio: {s['fgi_lead_time']:.2f}")
        print(f"   Backorders (promedio en el tiempo): {s['backorders']:.2f}")
        print(f"   Numero de calificaciones: {s['total_qualifications']}")

        print("\n[UTILIZACION POR ESTACION]:")
        for i, stat in enumerate(self.station_utilization):
            print(f"   Estacion {i}: Utilizacion={stat.mean * 100:6.1f}%, "
                  f"Backlog={self.backlog[i].mean:7.2f}")
        print(f"\n   Utilizacion del sistema: {s['system_utilization'] * 100:.1f}%")
        print(f"   Utilizacion de trabajadores: {s['worker_utilization'] * 100:.1f}%")
        print("="*80 + "\n")

    def export_results(self, prefix: str = "simulation", rule_name: str = "") -> Dict[str, str]:
        """
        Exporta resultados a CSV.

        Args:
            prefix: Prefijo base del archivo
            rule_name: Nombre de la regla de despacho para incluir en el nombre

        Returns:
            {"jobs": ruta, "metrics": ruta, "log": ruta (si hay trazado)}
        """
        suffix = f"_{rule_name}" if rule_name else ""
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        os.makedirs(self.output_dir, exist_ok=True)
        files = {}

        df_jobs = pd.DataFrame(self.jobs_completed, columns=[
            "job_id", "route", "arrival_time", "due_date", "completion_time", "lead_time",
            "tardiness", "fgi_time", "service_level", "backordered"
        ])
        files["jobs"] = os.path.join(self.output_dir, f"{prefix}{suffix}_jobs_{timestamp}.csv")
        df_jobs.to_csv(files["jobs"], index=False)
        print(f"[OK] Trabajos exportados: {files['jobs']}")

        files["metrics"] = os.path.join(self.output_dir, f"{prefix}{suffix}_metrics_{timestamp}.csv")
        self.metrics().to_dataframe().to_csv(files["metrics"], index=False)
        print(f"[OK] Metricas exportadas: {files['metrics']}")

        if self.event_manager:
            files["log"] = self.event_manager.export_to_csv(f"{prefix}{suffix}")
        return files


# ============================================================================
# FUNCIÓN PRINCIPAL
# ============================================================================

def main(argv: Optional[List[str]] = None):
    """Ejecuta una corrida desde la línea de comandos."""
    parser = argparse.ArgumentParser(description="Simulador de entrenamiento cruzado en planta de dos líneas")
    parser.add_argument("--config", help="Archivo JSON con los parámetros de la corrida")
    parser.add_argument("--dispatch", help="Regla de despacho: FCFS, LSF o MLSF")
    parser.add_argument("--seed", type=int, help="Semilla base")
    parser.add_argument("--observation", type=float, help="Tiempo de observación")
    parser.add_argument("--warmup", type=float, help="Tiempo de calentamiento")
    parser.add_argument("--workers", type=int, help="Trabajadores (fuerza laboral totalmente flexible)")
    parser.add_argument("--verbose", action="store_true", help="Imprimir llegadas y backorders")
    parser.add_argument("--trace", action="store_true", help="Registrar el log de eventos")
    parser.add_argument("--export", metavar="PREFIX", help="Exportar resultados a CSV con este prefijo")

    args = parser.parse_args(argv)

    config = SimulationConfig.from_json(args.config) if args.config else SimulationConfig()
    if args.dispatch:
        config.dispatch = args.dispatch
    if args.seed is not None:
        config.seed = args.seed
    if args.observation is not None:
        config.observation_time = args.observation
    if args.warmup is not None:
        config.warmup_time = args.warmup
    if args.workers is not None:
        config.workers = args.workers
        config.workforce_vector = None

    simulator = CrossTrainingSimulator(config, verbose=args.verbose, trace=args.trace)
    if not isinstance(config.layout, dict):
        Layouts.print_layout_info(simulator.layout, config.processing_ratio_worker)

    print("=== Running Simulation ===")
    summary = simulator.run()
    if not args.verbose:
        simulator.print_summary()
    print(f"Service Level: {summary['service_level'] * 100:.2f}%")
    print(f"Number of Qualifications: {summary['total_qualifications']}")

    if args.export:
        simulator.export_results(prefix=args.export, rule_name=simulator.dispatcher.strategy.value)
    return summary


if __name__ == "__main__":
    main()
