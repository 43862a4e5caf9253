"""
Google Sheets Connector

Read/write access to a destination workbook through the Sheets REST API.
"""

from .auth import ServiceAccountCredentialProvider
from .service import GoogleSheetsWorkbookClient

__all__ = ["GoogleSheetsWorkbookClient", "ServiceAccountCredentialProvider"]
