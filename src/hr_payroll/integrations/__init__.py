"""Adapters for collaborators outside the payroll core.

Each adapter is described by a Protocol so services can be wired with a
real implementation in production and a fake in tests.
"""
