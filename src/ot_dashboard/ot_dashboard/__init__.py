"""Overtime dashboard package.

Organized by feature modules (overtime, reports, session, users, ...) with a
thin Flask controller layer over services and REST-backed repositories.
"""
