"""Python client for the Vivimap HTTP API and place search."""
from app.client.api import ApiError, LoginResult, PlacementRejected, UploadedFile, UploadTooLarge, VivimapClient
from app.client.search import (
    LocationNotFound,
    NominatimGeocoder,
    SearchResult,
    SearchSuggestion,
    SuggestionDebouncer,
    zoom_for,
)
