"""
SLA Deadline Engine
===================

Bounded Context for business-hours SLA deadlines of inter-department tickets.

Responsibilities:
- Resolve the business calendar from raw settings
- Anchor response/resolution deadlines in work hours
- Pause and resume the SLA clock while a ticket waits on the requester
- Classify SLA standing (on track, at risk, breached)

The engine has no persistence, network or CLI surface of its own; the
hosting ticket service calls it and stores the returned clocks.
"""

__version__ = "1.0.0"
