"""Shift Payroll package.

Staff scheduling, attendance reconciliation and payroll accrual for a kindergarten,
organized by feature modules (shifts, timetracking, attendance, payroll, ...) with a thin
Flask controller layer over service/repository layers.
"""
