"""UI adapters bridging hosts to hydra_engine."""
