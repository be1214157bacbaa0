"""Leave module — leave client, schemas and approval workflow."""
