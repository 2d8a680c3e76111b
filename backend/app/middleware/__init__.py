# Middleware package init
"""
Customer Details Backend — Middleware Package
===============================================

Middleware Chain (request direction):
    Request → [Request ID] → [Access Log] → [Rate Limit] → [GZip/CORS] → Route

    1. Request ID first, so every later log line and error body has the id
    2. Access log wraps the rate limiter, so 429s are logged like any response
    3. Rate limit rejects before any database work happens
"""
