"""
Invoice Workflow Module
=======================

Bounded context for invoice workflow state and SLA tracking.

Responsibilities:
- Decode workflow snapshots supplied by the invoicing API
- Classify SLA health (none / normal / warning / overdue) at an explicit instant
- Render remaining/overdue durations, progress and badge hints
- Pass transitions through to the external workflow service
"""
