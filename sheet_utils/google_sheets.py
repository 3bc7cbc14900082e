"""Google Sheets backend for ``SheetTable``.

Talks to the Sheets v4 REST API with an OAuth refresh token. One store
instance targets one tab (``sheet_name``) of one spreadsheet.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, List, Optional, Sequence
from urllib import error as urlerror
from urllib import parse as urlparse
from urllib import request as urlrequest

from .config import ConfigError, Settings
from .store import SheetStore

logger = logging.getLogger(__name__)

SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"
TOKEN_URL = "https://oauth2.googleapis.com/token"

# Refresh the access token this long before Google says it expires.
_TOKEN_EXPIRY_MARGIN = 60

NAMED_COLORS = {
    "white": "#ffffff",
    "black": "#000000",
    "red": "#ff0000",
    "green": "#00ff00",
    "blue": "#0000ff",
    "yellow": "#ffff00",
}


class SheetsError(RuntimeError):
    """Raised when Google Sheets operations fail."""


def column_letter(index: int) -> str:
    """1-based column index to A1 letters (1 -> A, 27 -> AA)."""
    if index < 1:
        raise ValueError(f"Column index must be >= 1, got {index}")
    letters = ""
    while index:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def quote_sheet_name(name: str) -> str:
    return "'" + name.replace("'", "''") + "'"


def parse_color(color: Optional[str]) -> Dict[str, float]:
    """Convert ``#rgb``, ``#rrggbb`` or a basic colour name to an API colour.

    None means the default white background.
    """
    value = NAMED_COLORS.get((color or "white").strip().lower(), (color or "").strip())
    hex_digits = value.lstrip("#")
    if len(hex_digits) == 3:
        hex_digits = "".join(ch * 2 for ch in hex_digits)
    if not value.startswith("#") or len(hex_digits) != 6:
        raise ValueError(f"Unsupported colour: {color!r}")
    try:
        red, green, blue = (int(hex_digits[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError as exc:
        raise ValueError(f"Unsupported colour: {color!r}") from exc
    return {"red": red / 255, "green": green / 255, "blue": blue / 255}


class GoogleSheetsStore(SheetStore):
    """Sheet store backed by the Google Sheets API."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        spreadsheet_id: str,
        sheet_name: str = "Sheet1",
        *,
        timeout_seconds: int = 30,
    ) -> None:
        """Initialize the store.

        Args:
            client_id: OAuth client ID.
            client_secret: OAuth client secret.
            refresh_token: OAuth refresh token with the spreadsheets scope.
            spreadsheet_id: ID from the spreadsheet URL.
            sheet_name: Tab to operate on.
            timeout_seconds: Per-request timeout.
        """
        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token
        self._spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self.timeout_seconds = timeout_seconds
        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0
        self._metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleSheetsStore":
        if not settings.has_credentials:
            raise ConfigError(
                "Missing OAuth credentials. Ensure SHEET_UTILS_CLIENT_ID, "
                "SHEET_UTILS_CLIENT_SECRET, and SHEET_UTILS_REFRESH_TOKEN "
                "environment variables are set."
            )
        return cls(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            refresh_token=settings.refresh_token,
            spreadsheet_id=settings.spreadsheet_id,
            sheet_name=settings.sheet_name,
        )

    # ------------------------------------------------------------------
    # SheetStore
    # ------------------------------------------------------------------
    def read_display_values(self) -> List[List[str]]:
        return self._read_values("FORMATTED_VALUE")

    def read_raw_values(self) -> List[List[Any]]:
        return self._read_values("UNFORMATTED_VALUE")

    def write_block(self, top_row: int, left_col: int, values: Sequence[Sequence[Any]]) -> None:
        if not values:
            return
        width = max(len(row) for row in values)
        if width == 0:
            return
        rows = [list(row) + [""] * (width - len(row)) for row in values]
        a1_range = (
            f"{quote_sheet_name(self.sheet_name)}!"
            f"{column_letter(left_col)}{top_row}:"
            f"{column_letter(left_col + width - 1)}{top_row + len(rows) - 1}"
        )
        self._request(
            "PUT",
            f"/values/{urlparse.quote(a1_range, safe='')}",
            params={"valueInputOption": "USER_ENTERED"},
            body={"range": a1_range, "majorDimension": "ROWS", "values": rows},
        )
        logger.debug(f"Wrote {len(rows)}x{width} block at {a1_range}")

    def append_row(self, values: Sequence[Any]) -> None:
        a1_range = f"{quote_sheet_name(self.sheet_name)}!A1"
        self._request(
            "POST",
            f"/values/{urlparse.quote(a1_range, safe='')}:append",
            params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
            body={"majorDimension": "ROWS", "values": [list(values)]},
        )

    def delete_row(self, row_index: int) -> None:
        self._batch_update({
            "deleteDimension": {
                "range": {
                    "sheetId": self._sheet_id(),
                    "dimension": "ROWS",
                    "startIndex": row_index - 1,
                    "endIndex": row_index,
                }
            }
        })

    def set_background(self, row_index: int, color: Optional[str]) -> None:
        self.set_backgrounds([row_index], color)

    def set_backgrounds(self, row_indices: Sequence[int], color: Optional[str]) -> None:
        """Paint rows in a single ``batchUpdate``, reading the width once."""
        if not row_indices:
            return
        background = parse_color(color)
        sheet_id = self._sheet_id()
        width = max(self.column_count(), 1)
        self._batch_update(*(
            {
                "repeatCell": {
                    "range": {
                        "sheetId": sheet_id,
                        "startRowIndex": row_index - 1,
                        "endRowIndex": row_index,
                        "startColumnIndex": 0,
                        "endColumnIndex": width,
                    },
                    "cell": {"userEnteredFormat": {"backgroundColor": background}},
                    "fields": "userEnteredFormat.backgroundColor",
                }
            }
            for row_index in row_indices
        ))
        logger.debug(f"Set background {color!r} on {len(row_indices)} row(s)")

    def column_count(self) -> int:
        range_name = f"{quote_sheet_name(self.sheet_name)}!1:1"
        result = self._request("GET", f"/values/{urlparse.quote(range_name, safe='')}")
        values = result.get("values", [])
        return len(values[0]) if values else 0

    # ------------------------------------------------------------------
    # Spreadsheet metadata
    # ------------------------------------------------------------------
    def spreadsheet_timezone(self) -> Optional[str]:
        """The spreadsheet's own time zone setting, if it has one."""
        return self._spreadsheet_metadata().get("properties", {}).get("timeZone")

    def _sheet_id(self) -> int:
        for sheet in self._spreadsheet_metadata().get("sheets", []):
            properties = sheet.get("properties", {})
            if properties.get("title") == self.sheet_name:
                return int(properties.get("sheetId", 0))
        raise SheetsError(f"Sheet '{self.sheet_name}' not found in spreadsheet.")

    def _spreadsheet_metadata(self) -> Dict[str, Any]:
        if self._metadata is None:
            self._metadata = self._request(
                "GET",
                "",
                params={"fields": "properties.timeZone,sheets.properties(sheetId,title)"},
            )
        return self._metadata

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------
    def _read_values(self, render_option: str) -> List[List[Any]]:
        range_name = quote_sheet_name(self.sheet_name)
        result = self._request(
            "GET",
            f"/values/{urlparse.quote(range_name, safe='')}",
            params={
                "valueRenderOption": render_option,
                "dateTimeRenderOption": "FORMATTED_STRING",
            },
        )
        values = result.get("values", [])
        # The API drops trailing empty cells; keep the grid rectangular.
        width = max((len(row) for row in values), default=0)
        return [list(row) + [""] * (width - len(row)) for row in values]

    def _batch_update(self, *requests: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", ":batchUpdate", body={"requests": list(requests)})

    def _get_access_token(self) -> str:
        """Return a cached access token, refreshing it when close to expiry."""
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        payload = urlparse.urlencode({
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "refresh_token": self._refresh_token,
            "grant_type": "refresh_token",
        }).encode("utf-8")

        req = urlrequest.Request(
            TOKEN_URL,
            data=payload,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            method="POST",
        )

        try:
            with urlrequest.urlopen(req, timeout=15) as resp:
                data = json.loads(resp.read().decode("utf-8"))
        except urlerror.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore")
            raise SheetsError(f"Token request failed ({exc.code}): {detail}") from exc
        except urlerror.URLError as exc:
            raise SheetsError(f"Network error: {exc}") from exc

        token = data.get("access_token")
        if not token:
            raise SheetsError("Token response missing access_token.")

        self._access_token = token
        expires_in = float(data.get("expires_in", 0))
        self._token_expires_at = time.monotonic() + max(expires_in - _TOKEN_EXPIRY_MARGIN, 0)
        return token

    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Make an authenticated request against this spreadsheet."""
        token = self._get_access_token()

        url = f"{SHEETS_API_BASE}/{self._spreadsheet_id}{endpoint}"
        if params:
            url = f"{url}?{urlparse.urlencode(params)}"
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

        data = json.dumps(body).encode("utf-8") if body is not None else None
        req = urlrequest.Request(url, data=data, headers=headers, method=method)

        try:
            with urlrequest.urlopen(req, timeout=self.timeout_seconds) as resp:
                raw = resp.read().decode("utf-8")
        except urlerror.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore")
            raise SheetsError(f"Sheets API {method} {endpoint} failed ({exc.code}): {detail}") from exc
        except urlerror.URLError as exc:
            raise SheetsError(f"Network error: {exc}") from exc

        return json.loads(raw) if raw else {}
