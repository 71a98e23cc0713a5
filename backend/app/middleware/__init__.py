"""
Annuaire Backend — Middleware
==============================

Request → [CORS] → [Rate Limit] → [Request ID] → [Logging] → route

    CORSMiddleware is added last in main.py, so it is outermost and
    answers preflight requests before anything else runs.
    The rate limiter rejects before a request id is assigned; the access
    log runs inside the request id scope so each line carries it.
"""
