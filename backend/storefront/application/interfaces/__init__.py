from .remote_data_source import RemoteDataSource

__all__ = ["RemoteDataSource"]
