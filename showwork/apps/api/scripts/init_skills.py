"""Initialize the skill vocabulary used for project tags."""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from sqlalchemy import func, select

from core.database import async_session, init_database
from core.logging import get_logger, setup_logging
from domain.skill.models import Skill

setup_logging()
logger = get_logger(__name__)

DEFAULT_SKILLS = {
    "language": [
        "Python",
        "TypeScript",
        "JavaScript",
        "Go",
        "Rust",
        "Java",
        "Kotlin",
        "Swift",
        "C",
        "C++",
        "C#",
        "Ruby",
        "PHP",
        "Solidity",
        "SQL",
    ],
    "frontend": [
        "React",
        "Next.js",
        "Vue",
        "Svelte",
        "Angular",
        "Tailwind CSS",
        "Three.js",
    ],
    "backend": [
        "Node.js",
        "FastAPI",
        "Django",
        "Flask",
        "Express",
        "Spring Boot",
        "GraphQL",
    ],
    "data": [
        "PostgreSQL",
        "MySQL",
        "MongoDB",
        "Redis",
        "Supabase",
        "Firebase",
        "Pandas",
        "Apache Spark",
    ],
    "ml": [
        "PyTorch",
        "TensorFlow",
        "scikit-learn",
        "OpenCV",
        "LangChain",
    ],
    "devops": [
        "Docker",
        "Kubernetes",
        "AWS",
        "GCP",
        "Azure",
        "Terraform",
        "GitHub Actions",
    ],
    "mobile": [
        "React Native",
        "Flutter",
        "SwiftUI",
    ],
    "design": [
        "Figma",
    ],
    "game": [
        "Unity",
        "Unreal Engine",
        "Godot",
    ],
    "embedded": [
        "Arduino",
        "Raspberry Pi",
    ],
}


async def init_skills() -> None:
    """Insert missing skills; existing names keep their ids."""
    await init_database()

    async with async_session() as session:
        result = await session.execute(select(func.lower(Skill.name)))
        existing = {name for (name,) in result.all()}

        created = 0
        for category, names in DEFAULT_SKILLS.items():
            for name in names:
                if name.lower() in existing:
                    continue
                session.add(Skill(name=name, category=category))
                existing.add(name.lower())
                created += 1

        await session.commit()
        logger.info("skills_initialized", created=created, total=len(existing))


if __name__ == "__main__":
    asyncio.run(init_skills())
