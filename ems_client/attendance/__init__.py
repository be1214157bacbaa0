"""Attendance module — attendance client, schemas and clock workflow."""
