"""Client singletons for fetching dataset resources."""
from maps_directory.clients.dataset_client import DatasetClient

__all__ = ["DatasetClient"]
