"""Bundle source discovery."""
