"""
HTTP routes.

``router`` aggregates the domain routers; ``dependencies`` holds the
request guards and the accessors for objects created by the
application factory.
"""
