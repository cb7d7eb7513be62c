# =============================================================================
# CV Interview Question Service
# =============================================================================
# Generates technical interview questions from an uploaded CV and reviews
# code snippets, using a slow, rate-limited text-generation API (Gemini or
# any OpenAI-compatible endpoint).
#
# Every upstream call goes through one serialized worker. Callers are
# admitted through per-endpoint gates and wait on a one-shot result handle.
#
# Package structure:
#   interview_prep/
#   ├── api/          → FastAPI route handlers (CV analysis, question
#   │                    generation, code analysis) and dependencies
#   ├── models/       → Pydantic V2 response schemas and request enums
#   ├── services/     → Admission gates, backoff, LLM providers, prompts,
#   │                    CV parsing, skill scanning
#   └── workers/      → Task types, FIFO queue, serialized worker, pipeline
# =============================================================================
