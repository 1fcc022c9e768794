"""
Setup verification script for the PRD Forge backend.
Checks all dependencies and services are properly configured.
"""
import asyncio
import sys
import os
from typing import Awaitable, Callable, List, Tuple

# Color codes for terminal output
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
RESET = "\033[0m"

REQUIRED_PACKAGES = [
    "fastapi",
    "uvicorn",
    "sqlalchemy",
    "asyncpg",
    "pydantic",
    "pydantic_settings",
    "httpx",
    "alembic",
]


def print_status(message: str, status: bool):
    """Print colored status message."""
    symbol = f"{GREEN}✓{RESET}" if status else f"{RED}✗{RESET}"
    print(f"{symbol} {message}")


async def check_python_version() -> bool:
    """Check Python version is 3.10+."""
    version = sys.version_info
    if version.major == 3 and version.minor >= 10:
        print_status(f"Python version: {version.major}.{version.minor}.{version.micro}", True)
        return True
    else:
        print_status(f"Python version {version.major}.{version.minor} (requires 3.10+)", False)
        return False


async def check_dependencies() -> bool:
    """Check if required packages are installed."""
    all_installed = True
    for package in REQUIRED_PACKAGES:
        try:
            __import__(package)
            print_status(f"Package '{package}' installed", True)
        except ImportError:
            print_status(f"Package '{package}' missing", False)
            all_installed = False

    return all_installed


async def check_env_file() -> bool:
    """Check if .env file exists."""
    if os.path.exists(".env"):
        print_status(".env file exists", True)
        return True
    else:
        print_status(".env file missing (copy from .env.example)", False)
        return False


async def check_database() -> bool:
    """Check the configured DATABASE_URL accepts a connection."""
    try:
        from app.database import engine, ping

        async with engine.connect() as conn:
            await ping(conn)
        await engine.dispose()

        print_status("Database connection successful", True)
        return True

    except Exception as e:
        print_status(f"Database connection failed: {str(e)}", False)
        print(f"  {YELLOW}Check DATABASE_URL and that PostgreSQL is running{RESET}")
        return False


async def check_gemini_key() -> bool:
    """Check a Gemini API key is configured."""
    from app.config import settings

    if settings.gemini_configured():
        print_status("GEMINI_API_KEY is set", True)
        return True
    print_status("GEMINI_API_KEY is not set", False)
    print(f"  {YELLOW}Without it /api/generate-prd answers 503{RESET}")
    return False


async def check_gemini_model() -> bool:
    """Check the configured Gemini model is reachable with the key (metadata only)."""
    from app.config import settings

    if not settings.gemini_configured():
        print_status("Skipped: no GEMINI_API_KEY", False)
        return False

    try:
        import httpx

        url = f"{settings.GEMINI_BASE_URL.rstrip('/')}/models/{settings.GEMINI_MODEL}"
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(url, headers={"x-goog-api-key": settings.GEMINI_API_KEY})

        if response.status_code == 200:
            print_status(f"Gemini model '{settings.GEMINI_MODEL}' is available", True)
            return True
        print_status(f"Gemini returned status {response.status_code} for '{settings.GEMINI_MODEL}'", False)
        return False

    except Exception as e:
        print_status(f"Gemini connection failed: {str(e)}", False)
        return False


CHECKS: List[Tuple[str, Callable[[], Awaitable[bool]]]] = [
    ("Python Version", check_python_version),
    ("Dependencies", check_dependencies),
    ("Environment File", check_env_file),
    ("Database", check_database),
    ("Gemini API Key", check_gemini_key),
    ("Gemini Model", check_gemini_model),
]


async def main():
    """Run every check in order and exit non-zero if any failed."""
    rule = f"{BLUE}{'='*60}{RESET}"
    print(f"\n{rule}\n{BLUE}PRD Forge Backend - Setup Verification{RESET}\n{rule}")

    failed: List[str] = []
    for check_name, check_func in CHECKS:
        print(f"\n{BLUE}Checking {check_name}...{RESET}")
        try:
            ok = await check_func()
        except Exception as e:
            print_status(f"Error during check: {str(e)}", False)
            ok = False
        if not ok:
            failed.append(check_name)

    print(f"\n{rule}")
    passed = len(CHECKS) - len(failed)
    if not failed:
        print(f"{GREEN}✓ All checks passed! ({passed}/{len(CHECKS)}){RESET}")
        print(f"\n{GREEN}Start the API with:{RESET}")
        print("  uvicorn app.main:app --reload")
        print(f"{rule}\n")
        return

    print(f"{RED}✗ {len(failed)} check(s) failed ({passed}/{len(CHECKS)} passed):{RESET}")
    for name in failed:
        print(f"  {RED}- {name}{RESET}")
    if failed == ["Gemini API Key", "Gemini Model"]:
        print(f"\n{YELLOW}The API still starts; generation will answer 503 until a key is set.{RESET}")
    sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
