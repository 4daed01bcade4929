"""Storefront HTTP infrastructure package."""

from .http_remote_data_source import HttpRemoteDataSource

__all__ = ["HttpRemoteDataSource"]
