"""Domain layer: ports the rest of routespec depends on."""
