"""
Driven adapters implementing the ``MovieRepository`` port.

Only SQLite is provided.  Another backend can be plugged in by
implementing the same async methods and passing the instance to
``MovieService``.
"""
