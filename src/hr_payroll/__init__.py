"""HR / payroll administration package.

Organized by feature modules (employees, attendance, advances, payroll, ...)
with a thin Flask controller layer over service and repository layers.
"""
