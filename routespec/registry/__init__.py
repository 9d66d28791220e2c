"""Route registry package.

Modules:
    schemas: SchemaProtocol implementation and response specifications
    route_schema: RouteSchema and Middleware types
    registry: RouteRegistry and RegistryHandle
"""
