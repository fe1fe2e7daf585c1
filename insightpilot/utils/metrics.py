# Métricas en proceso: pruebas de conexión, consultas y requests HTTP

import logging
import threading
from collections import Counter, defaultdict, deque
from typing import Deque, Dict, List

logger = logging.getLogger(__name__)

# Observaciones que se conservan por serie de latencia
WINDOW = 1000


def summarize(values: List[float]) -> Dict[str, float]:
    """count/avg/min/max/p50/p95 de una ventana de latencias (ms)"""
    if not values:
        return {"count": 0, "avg": 0, "min": 0, "max": 0, "p50": 0, "p95": 0}
    ordered = sorted(values)
    count = len(ordered)
    return {
        "count": count,
        "avg": round(sum(ordered) / count, 2),
        "min": ordered[0],
        "max": ordered[-1],
        "p50": ordered[int(count * 0.5)],
        "p95": ordered[min(count - 1, int(count * 0.95))],
    }


class MetricsCollector:
    """
    Colector de métricas de InsightPilot (singleton).
    Se expone en JSON y en formato texto de Prometheus.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._lock = threading.Lock()
        self.reset()
        self._initialized = True

    def reset(self):
        with self._lock:
            self.counters: Dict[str, Counter] = {
                "requests_total": Counter(),  # por endpoint
                "errors_total": Counter(),  # por endpoint
                "asks_total": Counter(),  # completed / failed / rejected
                "probes_total": Counter(),  # connected / disconnected
            }
            self.latencies: Dict[str, Deque[float]] = defaultdict(lambda: deque(maxlen=WINDOW))
            self.gauges = {"active_sessions": 0, "connections": 0}

    # Alias de lectura usados por los tests y la API

    @property
    def asks_total(self) -> Counter:
        return self.counters["asks_total"]

    @property
    def probes_total(self) -> Counter:
        return self.counters["probes_total"]

    @property
    def active_sessions(self) -> int:
        return self.gauges["active_sessions"]

    @property
    def connections(self) -> int:
        return self.gauges["connections"]

    # Registro

    def record_request(self, endpoint: str, duration_ms: float, success: bool):
        with self._lock:
            self.counters["requests_total"][endpoint] += 1
            if not success:
                self.counters["errors_total"][endpoint] += 1
            self.latencies[f"request:{endpoint}"].append(duration_ms)

    def record_ask(self, duration_ms: float, outcome: str):
        """Una llamada a ask(): completed, failed o rejected"""
        with self._lock:
            self.counters["asks_total"][outcome] += 1
            self.latencies["ask"].append(duration_ms)

    def record_probe(self, duration_ms: float, status: str):
        """Una prueba de conexión con su estado final"""
        with self._lock:
            self.counters["probes_total"][status] += 1
            self.latencies["probe"].append(duration_ms)

    def set_active_sessions(self, count: int):
        self.gauges["active_sessions"] = count

    def set_connections(self, count: int):
        self.gauges["connections"] = count

    # Lectura

    def get_metrics(self) -> Dict:
        with self._lock:
            return {
                "counters": {name: dict(c) for name, c in self.counters.items()},
                "latency_ms": {
                    name: summarize(list(values)) for name, values in self.latencies.items()
                },
                "gauges": dict(self.gauges),
            }

    def get_prometheus_format(self) -> str:
        metrics = self.get_metrics()
        counters = metrics["counters"]
        lines = []

        labels = {
            "requests_total": "endpoint",
            "errors_total": "endpoint",
            "asks_total": "outcome",
            "probes_total": "status",
        }
        for name, label in labels.items():
            lines.append(f"# TYPE insightpilot_{name} counter")
            for value, count in sorted(counters[name].items()):
                lines.append(f'insightpilot_{name}{{{label}="{value}"}} {count}')

        for name, value in metrics["gauges"].items():
            lines.append(f"# TYPE insightpilot_{name} gauge")
            lines.append(f"insightpilot_{name} {value}")

        for series in ("ask", "probe"):
            stats = metrics["latency_ms"].get(series, summarize([]))
            lines.append(f'insightpilot_{series}_duration_avg_ms {stats["avg"]:.2f}')
            lines.append(f'insightpilot_{series}_duration_p95_ms {stats["p95"]:.2f}')

        return "\n".join(lines) + "\n"


def get_metrics() -> MetricsCollector:
    """Obtiene la instancia singleton de métricas"""
    return MetricsCollector()
