"""
Service layer.

Each service wraps the injected ``Database`` and holds the business
rules for one domain, so endpoints stay limited to authorization and
request/response shaping.
"""
