"""
Service layer for the hostel complaints service.

Services own transaction boundaries and return ``ServiceResult`` objects;
repositories below them only flush.
"""
