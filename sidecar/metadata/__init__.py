from .client import MetadataClient, MetadataError, MetadataFetchError, MetadataNotFound

__all__ = ["MetadataClient", "MetadataError", "MetadataFetchError", "MetadataNotFound"]
