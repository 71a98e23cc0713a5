"""
Annuaire Backend
=================

Backend for a directory of professionals: listing and search, reviews,
and Stripe-backed plan payments that activate listings.

    Routes    (app/routes)    HTTP only
    Services  (app/services)  matching, reviews, payments, images
    Schemas   (app/schemas)   response contracts with the client field names
    Models    (app/models)    SQLAlchemy ORM
    Database  (app/database)  async engine and sessions
"""

__version__ = "1.0.0"
