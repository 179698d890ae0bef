"""e2e-action — cache, build, serve and run Cypress tests in GitHub Actions."""

__version__ = "0.1.0"
