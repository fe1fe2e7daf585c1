# Adaptadores de salida: bases de datos, store y LLM
