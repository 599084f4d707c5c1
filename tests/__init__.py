# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Solinum API:
# - test_config.py: Settings parsing and the startup environment check
# - test_cors.py: Origin policies and the CORS gate middleware
# - test_app.py: Liveness, route table, security headers, diagnostics
# - test_session.py: Session cookie attributes and session login
# - test_auth.py: Passwords, tokens, login, Google sign-in
# - test_routes.py: Report, approval, notification and user endpoints
# - test_finaldoc.py: Final document upload and static serving
# - test_services.py: Service layer against mocked collections
#
# Run tests with: pytest
# =============================================================================
