"""
Hostel complaints service.

Complaint lifecycle management and automated staff assignment.
"""

__version__ = "1.0.0"
