"""hypothesis strategies producing protocol-valid bitcoin fixtures."""
