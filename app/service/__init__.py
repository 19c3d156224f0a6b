"""Use-cases sitting between the HTTP routes and the domain store."""
