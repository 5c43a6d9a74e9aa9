"""
auth — User authentication module.

Provides:
  • Signed session token creation & verification
  • Password hashing (bcrypt, run off the event loop)
  • Signup / Login / Me API routes
  • ``get_current_user_id`` FastAPI dependency
  • The ``AuthError`` taxonomy rendered as ``{success, message}`` JSON
"""
