"""Print a fresh Authorization header value for manual requests, e.g.

    curl -H "Authorization: $(python create_token.py)" localhost:3001/movies
"""
from movies_api.app.core.config import settings
from movies_api.app.core.security import issue_token

print(issue_token(settings))
