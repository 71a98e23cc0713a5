"""
Annuaire Backend — API Routes
===============================

    directory.py  GET  /api/data                      listing with filters
                  GET  /api/search                    scored search
    reviews.py    POST /api/review                    create a review
                  GET  /api/reviews/{professional_id} reviews of one professional
                  GET  /api/reviews                   400, id missing
    payments.py   POST /api/confirm-payment           activate or create a listing
                  POST /api/payment-intent            open a Stripe PaymentIntent
    health.py     GET  /health                        liveness

Handlers stay thin: read the request, call one service, set headers.
Errors are raised as app exceptions and rendered by the handlers in main.py.
"""
