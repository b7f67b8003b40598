# scripts/dev_jwt_token.py
"""Print a long-lived access token for a local user, e.g. for websocket testing."""
import sys
from datetime import timedelta

from taste_trail.shared.utils.security import create_access_token


def main():
    user_id = sys.argv[1] if len(sys.argv) > 1 else "local-admin"
    role = sys.argv[2] if len(sys.argv) > 2 else "ADMIN"
    token = create_access_token({"sub": user_id, "role": role}, timedelta(days=30))
    print(token)


if __name__ == "__main__":
    main()
