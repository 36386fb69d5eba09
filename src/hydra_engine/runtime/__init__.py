"""Runtime services shared by every hydra component."""
