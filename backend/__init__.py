"""Shop Estimator - job duration estimation backend.

Estimates how many hours a moped/motorcycle service job will take.

Architecture:
- Config store: base defaults merged with a runtime override JSON file
- Heuristic estimator: base hours + keyword and vehicle-age adjustments
- External model adapter: OpenAI chat completion, tagged outcome
- Estimation service: external model first, heuristic fallback
- Flask API: estimate endpoint plus config admin endpoints
"""

__version__ = "1.0.0"
