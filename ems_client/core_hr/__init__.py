"""Core HR module — employee, department and user clients, schemas and directories."""
