"""Shul Stipends package.

Attendance tracking and stipend calculation for the shul's morning programs:
the Handler daily incentives and the Kollel monthly payroll. Organised by
feature modules (incentives, kollel, payments, ledger, ...) with a thin Flask
controller layer over service/repository layers.
"""
