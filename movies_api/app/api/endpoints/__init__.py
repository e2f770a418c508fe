"""Domain specific routers (movies, auth)."""
