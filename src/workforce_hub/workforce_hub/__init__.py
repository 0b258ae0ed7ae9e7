"""Workforce Hub package.

This package is organized by feature modules (organizations, projects, tasks,
attendance, points, ...) with a thin Flask controller layer on top of
service/repository layers. Authorization rules live in the services.
"""
