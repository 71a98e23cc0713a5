"""
Annuaire Backend — Services Layer
===================================

    matching              pure scoring / filtering helpers
    coercion              lenient number, date and blank-value parsing
    directory_service     listing and scored search
    review_service        review submission and listing
    payment_base          PaymentProvider interface
    stripe_service        Stripe implementation (retries + circuit breaker)
    image_service         base64 image → data URI normalisation
    subscription_service  payment confirmation and PaymentIntent creation

Services never see HTTP objects; routes never touch the database directly.
"""
