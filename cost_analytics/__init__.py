"""Cloud Cost Analytics: spreadsheet cost line items to aggregated series."""

__version__ = "1.0.0"
