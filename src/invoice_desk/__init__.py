"""Invoice Desk - invoicing back office with workflow SLA tracking."""

__version__ = "1.0.0"
