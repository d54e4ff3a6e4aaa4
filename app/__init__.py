# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the web application:
# - main.py: App factory, lifespan, middleware setup, error handlers
# - config.py: Environment variable loading and settings
# - middleware.py: Method override and request logging
# - routers/: Route definitions organized by feature
# - templates/: Jinja2 templates for the server-rendered pages
#
# The app layer is thin - it handles HTTP concerns and delegates
# business logic to the core/ package.
# =============================================================================
