# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for products and farms
# - services/: Product and farm operations on top of a DocumentStore
#
# Persistence is injected: services receive a DocumentStore and never
# create database connections themselves.
# =============================================================================
