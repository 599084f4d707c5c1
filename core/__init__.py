# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the business logic behind the routers:
# - models/: Pydantic schemas for data validation
# - services/: MongoDB-backed operations per collection, plus upload storage
#
# Routers stay thin and delegate here.
# =============================================================================
