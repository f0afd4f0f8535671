"""Okta API client internals.

Architecture:
- client.py: request dispatcher (get/post/put/patch/delete)
- response.py: response normalization and error envelopes
- pagination.py: Link header cursor pagination
- rate_limit.py: x-rate-limit-* back-off and hard stop
- response_log.py: status classification, response logging, typed errors
- event_log.py: structured log events fanned out to log channels
- validators.py: connection validation
- exceptions.py: typed exceptions

Public names are re-exported from the ``okta_api_client`` package.
"""
