"""Maintenance scripts for operators with direct access to the admin store."""
