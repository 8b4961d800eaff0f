"""awv_server — FastAPI REST API for the AWV application.

Exposes the template, patient and visit services as a stateless HTTP API,
plus read-only reference data endpoints.
"""
