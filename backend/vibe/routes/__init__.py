# Routes package init
"""
Vibe Backend — API Routes Package
==================================

Route Inventory:
    - health.py:       GET /, GET /health
    - auth.py:         /api/auth         (register, login, verify, logout)
    - users.py:        /api/users        (profile, search, suggestions)
    - posts.py:        /api/posts        (feed, likes, comments)
    - marketplace.py:  /api/marketplace  (listings)
    - video.py:        /api/video        (room lifecycle)

Routes stay thin: parse the request, call a service, wrap the result in
its success envelope. Business rules live in services.
"""
