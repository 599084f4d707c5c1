# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App factory, middleware chain, lifespan (MongoDB), entry point
# - config.py: Environment variable loading and settings
# - middleware/: CORS gate, authentication backend, security headers
# - auth/: Login, Google sign-in, auth dependencies
# - routers/: API endpoint definitions and the route table
#
# The app layer is thin - it handles HTTP concerns and delegates
# business logic to the core/ package.
# =============================================================================
