"""
hub_provisioner.observability

Observability package.

Responsibilities:
- Structured logging configuration.
- Run context propagation for consistent log enrichment.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Metrics/tracing exporters can be added here without touching orchestration logic.
