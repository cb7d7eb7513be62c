# =============================================================================
# Unit Tests — Skill Scanner
# =============================================================================

from __future__ import annotations

from interview_prep.services.skills import COMMON_TECH_STACKS, extract_tech_stack


class TestExtractTechStack:
    def test_vocabulary_size(self):
        assert len(COMMON_TECH_STACKS) == 41
        assert len(set(COMMON_TECH_STACKS)) == 41

    def test_case_insensitive(self):
        assert extract_tech_stack("worked with KUBERNETES and docker") == [
            "Docker", "Kubernetes",
        ]

    def test_vocabulary_order_no_duplicates(self):
        result = extract_tech_stack("Scrum, Python, Python again, AWS")
        assert result == ["AWS", "Python", "Scrum"]

    def test_substring_matches(self):
        # "JavaScript" contains "Java"; "PostgreSQL" contains "SQL"
        result = extract_tech_stack("JavaScript and PostgreSQL")
        assert "Java" in result
        assert "JavaScript" in result
        assert "SQL" in result
        assert "PostgreSQL" in result

    def test_symbols(self):
        result = extract_tech_stack("C#, C++, .NET and CI/CD pipelines")
        assert {"C#", "C++", ".NET", "CI/CD"} <= set(result)

    def test_empty_text(self):
        assert extract_tech_stack("") == []
        assert extract_tech_stack(None) == []

    def test_nothing_found(self):
        assert extract_tech_stack("Accountant, Excel wizard") == []
