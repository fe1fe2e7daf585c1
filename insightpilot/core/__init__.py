# Core - Dominio, puertos y servicios
