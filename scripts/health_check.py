"""Health check script for all environments"""
import asyncio
import sys

import httpx

from taste_trail.core.config import get_settings


async def check_health() -> bool:
    settings = get_settings()

    urls = {
        "local": "http://localhost:8001/health",
        "dev": "http://localhost:8000/health",
        "staging": "https://staging-api.tastetrail.app/health",
        "prod": "https://api.tastetrail.app/health",
    }

    env = settings.ENVIRONMENT.value
    url = urls.get(env)
    if not url:
        print(f"Unknown environment: {env}")
        return False

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(url)
            data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        print(f"Health check failed: {e}")
        return False

    print(f"Environment: {env}")
    print(f"Status: {data['status']}")
    print("Services:")
    for service, status in data["services"].items():
        print(f"  {'ok  ' if status else 'DOWN'} {service}")
    print(f"Active sockets: {data.get('activeConnections', 0)}")

    return data["status"] == "healthy"


if __name__ == "__main__":
    sys.exit(0 if asyncio.run(check_health()) else 1)
