"""Runtime layer: transport execution, retries, observability."""
