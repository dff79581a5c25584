"""Reservations app package.

The reservation engine: reservations of single resources by persons or
groups, recurring series and their per-occurrence exceptions, the
availability index built on occurrence expansion, booking validation
and the admin approval workflow with cascading rejection of conflicts.
"""
