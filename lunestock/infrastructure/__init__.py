"""Infrastructure layer: HTTP clients for the hosted data store and identity provider."""
