"""
auth — User authentication module.

Provides:
  • Signed bearer token issuance & verification (``TokenIssuer``)
  • Password hashing (bcrypt)
  • Register / Login / Theme / Me API routes
  • ``get_current_user`` FastAPI dependency chain
"""
