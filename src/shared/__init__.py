"""
Shared Kernel Module
====================

Generic infrastructure shared by the bounded contexts (currently SLA).

DO NOT add business logic from the SLA context to the shared kernel.
"""

__version__ = "1.0.0"
