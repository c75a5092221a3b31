"""Society fines package.

Attendance and fine reconciliation for a mutual-aid society, organized by
feature modules (members, meetings, funerals, common_works, ...) with a thin
Flask controller layer over service/repository layers.
"""
