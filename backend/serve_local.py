#!/usr/bin/env python3
"""Local development server for the shop estimator backend.

Usage:
    cd backend
    source venv/bin/activate
    python serve_local.py

This starts a Flask server (default port 5000) handling:
- POST /api/ai/estimate-duration
- GET  /api/ai/config
- PUT  /api/ai/config
- GET  /api/health

The booking form and admin config page expect VITE_API_URL to point at
http://localhost:<port>/api.
"""

from config.settings import settings
from main import create_app
from utils.logging_setup import configure_logging

configure_logging(settings.log_level, json_logs=settings.is_production)

app = create_app()


if __name__ == '__main__':
    port = settings.port
    print(f"""
╔════════════════════════════════════════════════════════════════╗
║  Shop Estimator - Local Development Server                     ║
╠════════════════════════════════════════════════════════════════╣
║                                                                ║
║  Server running on: http://127.0.0.1:{port}
║                                                                ║
║  Endpoints:                                                    ║
║  • POST /api/ai/estimate-duration                              ║
║  • GET  /api/ai/config                                         ║
║  • PUT  /api/ai/config                                         ║
║  • GET  /api/health                                            ║
║                                                                ║
║  Override file: {settings.estimator_override_path}
║  OpenAI key   : {'set' if settings.openai_api_key else 'missing (heuristic only)'}
║                                                                ║
╚════════════════════════════════════════════════════════════════╝
""")
    app.run(host='127.0.0.1', port=port, debug=not settings.is_production, threaded=True)
