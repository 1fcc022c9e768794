"""
Generation pipeline dependency.

Routes receive the PRDGenerator through ``Depends(get_prd_generator)`` so
tests can swap the Gemini client via ``app.dependency_overrides``.
"""
from app.services.prd_generator import PRDGenerator


def get_prd_generator() -> PRDGenerator:
    """A generator bound to a Gemini client built from settings."""
    return PRDGenerator()
