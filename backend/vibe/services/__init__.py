# Services package init
"""
Vibe Backend — Services Layer
==============================

Business rules between the HTTP routes and the database.

Service Inventory:
    - AuthService:         register, login, token verification
    - UserService:         profiles, search, suggestions
    - PostService:         feed, likes, comments
    - MarketplaceService:  listings, filters, sold state
    - VideoService:        room lifecycle and participants

Every service method takes the request's AsyncSession as its first
argument, raises exceptions from vibe.exceptions on failure and returns
response schemas. Each module exposes a ready-made instance
(`post_service`, ...) used by the routes.
"""
