"""
Imports app for the flight school backend.

This app handles CSV imports for flight logs, users, fleet, ICAO reference
types and reference airports, with batch tracking and per-row error reports.
"""
