"""Auth module — session store, login schemas and role gates."""
