"""Domain services. Routers commit; services add, flush and raise domain errors."""
