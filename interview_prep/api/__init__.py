# =============================================================================
# API Package — FastAPI Route Handlers
# =============================================================================
# Each module defines a FastAPI APIRouter for a specific feature:
#   - questions.py: CV skill analysis and interview question generation
#   - code_analysis.py: Code snippet review
#   - deps.py: Dependencies resolving the pipeline and admission gates
# =============================================================================
