"""Contract descriptors, ownership lifecycle, orchestration and run flows."""
