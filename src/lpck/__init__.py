"""Pack and install interdependent npm workspace packages into a consumer project."""
