# Adaptadores - Entrada (API, CLI) y salida (bases de datos, store, LLM)
