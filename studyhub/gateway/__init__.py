"""
API Gateway Module

Single entry point for HTTP requests: middleware, routers and probes.
"""
from .gateway import APIGateway

__all__ = ["APIGateway"]
