"""
Parcel acquisition module.

This module validates raw parcel rows into Parcel records and loads them
from delimited files.

Primary Usage:
    from cadastre.acquisition import ParcelFileLoader

    loader = ParcelFileLoader()
    result = loader.load("data/parcels.csv")
    parcels = result.parcels
"""

from .file_loader import ParcelFileLoader, load_parcels
from .models import LoadResult, LoaderConfig, SkippedRow
from .parcel import Parcel, SortKey, sort_parcels

__all__ = [
    # Records
    "Parcel",
    "SortKey",
    "sort_parcels",
    # Models
    "LoadResult",
    "LoaderConfig",
    "SkippedRow",
    # File Loader
    "ParcelFileLoader",
    "load_parcels",
]
