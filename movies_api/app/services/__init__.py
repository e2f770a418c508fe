"""
Service layer abstraction.

``MovieService`` encapsulates the business rules for movies and talks
to storage only through the ``MovieRepository`` port, so API handlers
and tests can swap the data layer without touching the rules.
"""
