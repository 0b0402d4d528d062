"""Backend services for the Nencho tools."""
