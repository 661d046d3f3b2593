# Routes package init
"""
DrawCalc Backend - API Routes Package
=====================================

Route Inventory:
    - calculate.py:  POST /calculate   (upload a drawing, get results)
    - health.py:     GET  /health      (liveness probe, body "OK")
    - root.py:       *    /            (empty 200 carrying CORS headers)

Routes stay thin: they read the request, call the inference client, and
shape the response. OPTIONS never reaches them; the CORS middleware answers it.
"""
