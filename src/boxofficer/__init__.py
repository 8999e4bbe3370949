"""BoxOfficer: box-office and streaming-availability aggregation API."""

__version__ = "0.1.0"
