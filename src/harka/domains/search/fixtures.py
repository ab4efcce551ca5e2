"""Demo collections loaded into the admin search index in development."""

from datetime import datetime, timezone
from typing import Dict, List

from .models import EntityType, SearchableEntity


def _date(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def demo_collections() -> Dict[str, List[SearchableEntity]]:
    """Fresh copies of the demo users, courses and discussions."""
    return {
        "users": [
            SearchableEntity(
                id="1",
                type=EntityType.USER,
                title="John Doe",
                content="Senior Software Engineer with expertise in React and TypeScript",
                tags=["developer", "senior", "active"],
                metadata={"role": "admin", "status": "active", "joinDate": "2023-01-15"},
                created_at=_date("2023-01-15"),
                updated_at=_date("2024-01-20"),
            ),
            SearchableEntity(
                id="2",
                type=EntityType.USER,
                title="Jane Smith",
                content="Product Manager specializing in educational technology",
                tags=["manager", "education", "active"],
                metadata={"role": "user", "status": "active", "joinDate": "2023-03-10"},
                created_at=_date("2023-03-10"),
                updated_at=_date("2024-01-18"),
            ),
        ],
        "courses": [
            SearchableEntity(
                id="1",
                type=EntityType.COURSE,
                title="Advanced TypeScript Patterns",
                description="Learn advanced TypeScript patterns and best practices for scalable applications",
                content="Complete course covering generics, decorators, advanced types, and more",
                tags=["typescript", "advanced", "programming"],
                metadata={"difficulty": "advanced", "duration": "8 weeks", "enrolled": 245},
                created_at=_date("2023-06-01"),
                updated_at=_date("2024-01-15"),
            ),
            SearchableEntity(
                id="2",
                type=EntityType.COURSE,
                title="React Performance Optimization",
                description="Master React performance optimization techniques",
                content="Deep dive into React rendering, memoization, code splitting, and performance monitoring",
                tags=["react", "performance", "optimization"],
                metadata={"difficulty": "intermediate", "duration": "6 weeks", "enrolled": 189},
                created_at=_date("2023-07-15"),
                updated_at=_date("2024-01-10"),
            ),
        ],
        "discussions": [
            SearchableEntity(
                id="1",
                type=EntityType.DISCUSSION,
                title="Best practices for state management",
                content="What are the current best practices for managing complex application state?",
                tags=["state-management", "architecture", "question"],
                metadata={"author": "user_123", "replies": 12, "likes": 8, "category": "technical"},
                created_at=_date("2024-01-10"),
                updated_at=_date("2024-01-20"),
            ),
        ],
    }
