"""
cashbook_services -- orchestration over the cashbook kernel and engines.

``ReportingService`` is the read side (selector snapshot + pure engines);
``WorkshopJobService`` is the validated write side for workshop jobs.
Neither commits; callers own the transaction.
"""

from cashbook_services.reporting_service import ReportingService
from cashbook_services.workshop_job_service import JobItemInput, WorkshopJobService

__all__ = [
    "JobItemInput",
    "ReportingService",
    "WorkshopJobService",
]
