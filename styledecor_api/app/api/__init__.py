"""
API package containing versioned routes and shared dependencies.

``deps`` builds the services for each request from the resources the
application created at startup.  Version subpackages such as ``v1``
expose a top-level ``router`` that includes their domain endpoints.
"""
