# Adaptadores de entrada - API REST y CLI
