"""Print a long-lived access token for a user.

Usage:
    python create_token.py business@demo.com
"""
import sys

from franchise_hub_api.app.core.security import create_access_token

email = sys.argv[1] if len(sys.argv) > 1 else "business@demo.com"
# Lifetime in seconds, e.g. 365 days
token = create_access_token({"sub": email}, expires_delta=365 * 24 * 60 * 60)
print(token)
