"""InsightPilot - preguntas en lenguaje natural sobre bases de datos relacionales."""

__version__ = "1.0.0"
