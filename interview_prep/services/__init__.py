# =============================================================================
# Services Package — Business Logic
# =============================================================================
# Contains the logic around the generation queue, separated from API handlers:
#   - admission.py: Non-blocking per-endpoint permit pools (429 on overflow)
#   - backoff.py: Retry delay from a rate-limit message
#   - llm.py: Gemini / OpenAI-compatible providers with classified outcomes
#   - prompting.py: Prompt construction and response text extraction
#   - parser.py: CV text extraction with Docling
#   - skills.py: Fixed technology vocabulary scan
# =============================================================================
