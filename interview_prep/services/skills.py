# =============================================================================
# Skill Scanner — Fixed Technology Vocabulary
# =============================================================================
# Case-insensitive substring match of CV text against a fixed list of
# technologies. Matching is deliberately naive: "Java" also matches inside
# "JavaScript", and "Go" matches inside "Google".
# =============================================================================

from __future__ import annotations

COMMON_TECH_STACKS: tuple[str, ...] = (
    "Java", "Spring Boot", "Microservices", "Kafka", "Docker", "Kubernetes",
    "AWS", "Azure", "GCP", "SQL", "NoSQL", "MongoDB", "PostgreSQL", "MySQL",
    "Redis", "React", "Angular", "Vue", "JavaScript", "TypeScript", "HTML", "CSS",
    "Node.js", "Python", "Go", "C++", "C#", ".NET", "Rest API", "GraphQL",
    "CI/CD", "Jenkins", "Git", "Maven", "Gradle", "Hibernate", "JPA",
    "Design Patterns", "System Design", "Agile", "Scrum",
)


def extract_tech_stack(cv_text: str | None) -> list[str]:
    """Return the vocabulary entries found in `cv_text`, in vocabulary order."""
    if not cv_text:
        return []

    lowered = cv_text.lower()
    return [skill for skill in COMMON_TECH_STACKS if skill.lower() in lowered]
