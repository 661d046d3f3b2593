# Middleware package init
"""
DrawCalc Backend - Middleware Package
=====================================

Middleware Chain (outermost first):
    Request → [CORS] → [Request ID] → [Logging] → Route Handler

    1. CORS outermost: OPTIONS is answered before anything else runs, and the
       Access-Control-Allow-* headers land on every response, errors included
    2. Request ID: correlation ID for every log line of the request
    3. Access log: method, path, status, duration and upload size/type,
       tagged with the request ID
"""
