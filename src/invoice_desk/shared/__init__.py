"""
Shared Kernel Module
====================

Generic infrastructure shared by the bounded contexts (workflow, invoices):
structured logging and HTTP middleware.

DO NOT add workflow or SLA business logic to the shared kernel.
"""
