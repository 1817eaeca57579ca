"""Cloud Deployer: deployment orchestration against a hosting platform API."""

__version__ = "0.1.0"
